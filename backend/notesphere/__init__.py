"""
NoteSphere 后端应用包。

负责创建 Flask 应用实例并初始化扩展 (SQLAlchemy、Migrate、JWT、CORS、Limiter)，
配置日志、注册错误处理器和全部蓝图。

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
import os
import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy import event

from notesphere import config as default_config
from notesphere.utils.error_handler import ErrorHandler

# 初始化扩展
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

# 限流存储默认使用内存，生产环境可在配置中指向 Redis
limiter = Limiter(key_func=get_remote_address)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def _base_config():
    """从 config 模块收集默认配置"""
    return dict(
        SECRET_KEY=default_config.SECRET_KEY,
        SQLALCHEMY_DATABASE_URI=default_config.get_database_uri(),
        SQLALCHEMY_TRACK_MODIFICATIONS=default_config.SQLALCHEMY_TRACK_MODIFICATIONS,
        SQLALCHEMY_ECHO=default_config.SQLALCHEMY_ECHO,
        JWT_SECRET_KEY=default_config.JWT_SECRET_KEY,
        JWT_TOKEN_LOCATION=default_config.JWT_TOKEN_LOCATION,
        JWT_HEADER_NAME=default_config.JWT_HEADER_NAME,
        JWT_HEADER_TYPE=default_config.JWT_HEADER_TYPE,
        JWT_ACCESS_TOKEN_EXPIRES=default_config.JWT_ACCESS_TOKEN_EXPIRES,
        RATELIMIT_STORAGE_URI=default_config.RATELIMIT_STORAGE_URI,
        RATELIMIT_DEFAULT=default_config.RATELIMIT_DEFAULT,
        RATELIMIT_ENABLED=default_config.RATELIMIT_ENABLED,
        COUNTER_STRICT_MODE=default_config.COUNTER_STRICT_MODE,
        COMMENT_REQUIRE_REVIEW=default_config.COMMENT_REQUIRE_REVIEW,
        COMMENT_MAX_LENGTH=default_config.COMMENT_MAX_LENGTH,
        MESSAGE_MAX_LENGTH=default_config.MESSAGE_MAX_LENGTH,
        PAGE_SIZE_DEFAULT=default_config.PAGE_SIZE_DEFAULT,
        PAGE_SIZE_MAX=default_config.PAGE_SIZE_MAX,
        LOG_LEVEL=default_config.LOG_LEVEL,
        LOG_DIR=default_config.LOG_DIR,
    )


def create_app(config_object=None):
    """
    创建并配置 Flask 应用。

    参数:
        config_object: 可选的配置映射，覆盖 config 模块中的默认值 (测试时传入内存数据库等)
    """
    app = Flask(__name__, instance_relative_config=False)

    app.config.from_mapping(_base_config())
    if config_object:
        app.config.from_mapping(config_object)

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    CORS(app,
         origins=default_config.CORS_ORIGINS,
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization"],
         supports_credentials=True)

    # SQLite 需要显式 BEGIN，否则 pysqlite 会吞掉 SAVEPOINT 的语义
    with app.app_context():
        _setup_sqlite_listener(app)

    ErrorHandler.register_handlers(app)

    @jwt.invalid_token_loader
    def invalid_token_callback(error_string):
        return jsonify({
            'code': 422,
            'error': 'invalid_token',
            'message': '无效的访问令牌',
            'data': {'errors': [str(error_string)]}
        }), 422

    @jwt.unauthorized_loader
    def unauthorized_callback(error_string):
        return jsonify({
            'code': 401,
            'error': 'missing_token',
            'message': '当前接口需要认证才能访问。',
            'data': {'errors': [str(error_string)]}
        }), 401

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'code': 401,
            'error': 'token_expired',
            'message': '您提交的 token 错误或已过期。',
            'data': {}
        }), 401

    with app.app_context():
        # 导入模型，确保 Flask-Migrate 能看到所有表
        from notesphere import models  # noqa: F401
        from notesphere.routes.auth import auth_bp
        from notesphere.routes.notes import notes_bp
        from notesphere.routes.likes_collect import likes_collect_bp
        from notesphere.routes.follow import follow_bp
        from notesphere.routes.comments import comments_bp
        from notesphere.routes.messages import messages_bp
        from notesphere.routes.users import users_bp

        app.register_blueprint(auth_bp, url_prefix='/api/auth')
        app.register_blueprint(notes_bp, url_prefix='/api/notes')
        app.register_blueprint(likes_collect_bp, url_prefix='/api/likesAndCollect')
        app.register_blueprint(follow_bp, url_prefix='/api/follow')
        app.register_blueprint(comments_bp, url_prefix='/api/comments')
        app.register_blueprint(messages_bp, url_prefix='/api/messages')
        app.register_blueprint(users_bp, url_prefix='/api/users')

    @app.route('/api/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'message': '后端服务运行正常',
            'error_count': ErrorHandler.get_error_stats()['total_count'],
        }), 200

    app.url_map.strict_slashes = False
    app.logger.info("Flask 应用创建完成")
    return app


def _configure_logging(app):
    """配置应用日志：控制台输出，LOG_DIR 非空时同时写入文件"""
    level = logging.getLevelName(str(app.config.get('LOG_LEVEL', 'INFO')).upper())
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in app.logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        app.logger.addHandler(console_handler)

    log_dir = app.config.get('LOG_DIR')
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, 'notesphere.log'))
        file_handler.setFormatter(formatter)
        app.logger.addHandler(file_handler)

    # 服务层使用模块级 logger，统一挂到同一级别
    logging.getLogger('notesphere').setLevel(level)


def _setup_sqlite_listener(app):
    engine = db.engine
    if engine.dialect.name != 'sqlite':
        return

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        # 关闭 pysqlite 自带的事务管理，由下方 begin 事件接管
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    app.logger.debug("SQLite 事务监听器已挂载")
