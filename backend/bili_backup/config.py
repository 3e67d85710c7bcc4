"""
应用配置
支持从环境变量读取配置
"""
import os
import secrets

from dotenv import load_dotenv

load_dotenv()

# backend 目录的绝对路径
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    """基础配置"""

    # ==================== 安全配置 ====================
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)

    # 凭证加密密钥（Fernet）
    COOKIE_ENCRYPTION_KEY = os.environ.get('COOKIE_ENCRYPTION_KEY')

    API_KEY = os.environ.get('API_KEY')
    ADMIN_API_KEY = os.environ.get('ADMIN_API_KEY')

    # ==================== 数据库配置 ====================
    DATABASE_URL = os.environ.get('DATABASE_URL')
    if DATABASE_URL:
        SQLALCHEMY_DATABASE_URI = DATABASE_URL
    else:
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{os.path.join(BASE_DIR, "bili_backup.db")}'

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # ==================== CORS 配置 ====================
    CORS_ORIGINS = os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173'
    ).split(',')

    # ==================== 备份文件路径 ====================
    BACKUP_PATH = os.environ.get('BACKUP_PATH') or os.path.join(BASE_DIR, 'datas', 'backups')

    # ==================== 日志配置 ====================
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')

    # ==================== 请求配置 ====================
    # 同时在途的请求数
    BILI_MAX_CONCURRENCY = int(os.environ.get('BILI_MAX_CONCURRENCY', '2'))
    # 网络错误重试次数与间隔（秒）
    BILI_MAX_RETRIES = int(os.environ.get('BILI_MAX_RETRIES', '3'))
    BILI_RETRY_INTERVAL = float(os.environ.get('BILI_RETRY_INTERVAL', '1.0'))
    # 单次请求超时（秒）
    BILI_REQUEST_TIMEOUT = float(os.environ.get('BILI_REQUEST_TIMEOUT', '30'))
    # 操作间随机延迟区间（毫秒），过短容易触发风控
    BILI_DELAY_MIN_MS = int(os.environ.get('BILI_DELAY_MIN_MS', '1000'))
    BILI_DELAY_MAX_MS = int(os.environ.get('BILI_DELAY_MAX_MS', '3000'))
    # 游标分页最大迭代次数
    BILI_CURSOR_MAX_ITERATIONS = int(os.environ.get('BILI_CURSOR_MAX_ITERATIONS', '100'))

    @classmethod
    def init_paths(cls):
        """初始化数据目录"""
        if not os.path.exists(cls.BACKUP_PATH):
            os.makedirs(cls.BACKUP_PATH)

    @classmethod
    def get_cors_config(cls):
        """获取 CORS 配置"""
        return {
            "origins": cls.CORS_ORIGINS,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "X-API-Key", "Authorization"],
            "supports_credentials": True,
        }


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    LOG_LEVEL = 'WARNING'

    @classmethod
    def validate(cls):
        """验证生产环境必要配置，返回警告列表"""
        errors = []

        if not os.environ.get('SECRET_KEY'):
            errors.append('SECRET_KEY 环境变量未设置')

        if not os.environ.get('COOKIE_ENCRYPTION_KEY'):
            errors.append('COOKIE_ENCRYPTION_KEY 环境变量未设置（无法保存登录凭证）')

        if not os.environ.get('ADMIN_API_KEY'):
            errors.append('ADMIN_API_KEY 环境变量未设置（清空操作将被禁止）')

        return errors


class TestingConfig(Config):
    """测试环境配置"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    BILI_RETRY_INTERVAL = 0.0
    BILI_DELAY_MIN_MS = 0
    BILI_DELAY_MAX_MS = 0


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """根据环境变量获取配置类"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
