"""taskdesk Core -- 领域模型、配置、数据网关与会话"""
