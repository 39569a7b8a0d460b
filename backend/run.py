#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
NoteSphere 后端服务启动脚本

使用方法：
1. 启动开发服务器：python run.py
2. 使用gunicorn部署：gunicorn -w 4 -b 0.0.0.0:5001 "run:app"

注意：
- 开发模式下使用Flask内置服务器
- 多进程部署时请把 RATELIMIT_STORAGE_URI 指向共享存储
"""
import logging

from notesphere import create_app, config

logger = logging.getLogger(__name__)

# 创建Flask应用实例 - 为gunicorn提供
app = create_app()


# 直接运行此脚本时启动Flask开发服务器
if __name__ == '__main__':
    logger.info(f"应用配置: HOST={config.API_HOST}, PORT={config.API_PORT}, DEBUG={config.API_DEBUG}")
    app.run(host=config.API_HOST, port=config.API_PORT, debug=config.API_DEBUG)
