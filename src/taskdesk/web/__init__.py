"""taskdesk Web -- 任务集合控制器的 HTTP 展示边界"""
