"""taskdesk -- 个人任务跟踪客户端"""
