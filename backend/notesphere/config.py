import os
from dotenv import load_dotenv

# 加载.env文件
load_dotenv()


def _env_bool(name, default):
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes')


# API相关配置
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('API_PORT', 5001))
API_DEBUG = _env_bool('API_DEBUG', False)

# 安全相关配置
SECRET_KEY = os.getenv('SECRET_KEY', 'dev_secret_key_12345')
JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt_secret_key_67890')
JWT_ACCESS_TOKEN_EXPIRES = 60 * 60 * 24 * 30  # 30天
JWT_TOKEN_LOCATION = ['headers']
JWT_HEADER_NAME = 'Authorization'
JWT_HEADER_TYPE = 'Bearer'

# 数据库配置
DB_TYPE = os.getenv('DB_TYPE', 'sqlite')
DB_USER = os.getenv('DB_USER')
DB_PASSWORD = os.getenv('DB_PASSWORD')
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_NAME = os.getenv('DB_NAME')
SQLALCHEMY_TRACK_MODIFICATIONS = False
SQLALCHEMY_ECHO = _env_bool('SQLALCHEMY_ECHO', False)

# 限流配置，多进程部署时应指向 Redis，例如 redis://localhost:6379/1
RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
RATELIMIT_DEFAULT = os.getenv('RATELIMIT_DEFAULT', '3000 per hour')
RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)

# 计数器一致性：开启后，聚合行缺失会让整个事务失败而不是跳过
COUNTER_STRICT_MODE = _env_bool('COUNTER_STRICT_MODE', False)

# 评论/消息
COMMENT_REQUIRE_REVIEW = _env_bool('COMMENT_REQUIRE_REVIEW', False)  # 开启后新评论进入待审核状态
COMMENT_MAX_LENGTH = int(os.getenv('COMMENT_MAX_LENGTH', 1000))
MESSAGE_MAX_LENGTH = int(os.getenv('MESSAGE_MAX_LENGTH', 2000))

# 分页
PAGE_SIZE_DEFAULT = 10
PAGE_SIZE_MAX = 50

# 日志
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR', '')

# CORS配置
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:5001",
]


# 获取数据库URI
def get_database_uri():
    """构建数据库URI"""
    if os.getenv('DATABASE_URL'):
        return os.getenv('DATABASE_URL')
    if DB_TYPE == 'postgresql':
        return f'postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
    # 默认使用SQLite
    return 'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'notesphere.db')
