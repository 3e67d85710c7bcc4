"""
应用入口
B站账号数据备份 / 还原 - 后端服务

启动方式:
    python run.py

环境变量配置:
    - 在 backend 目录下创建 .env
    - 参见 bili_backup/config.py 中的配置项
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from bili_backup import create_app
from bili_backup.config import get_config

config_class = get_config()

app = create_app(config_class)

if __name__ == '__main__':
    env = os.environ.get('FLASK_ENV', 'development')
    port = int(os.environ.get('PORT', '8000'))

    print("=" * 60)
    print("📦 B站账号备份 - 后端服务")
    print("=" * 60)
    print(f"📌 服务地址: http://localhost:{port}")
    print(f"📌 环境: {env}")
    print(f"📌 数据库: {app.config['SQLALCHEMY_DATABASE_URI']}")
    print(f"📌 备份目录: {app.config['BACKUP_PATH']}")
    print(f"📌 CORS 允许来源: {', '.join(config_class.CORS_ORIGINS)}")
    print(
        f"📌 请求并发: {app.config['BILI_MAX_CONCURRENCY']}，"
        f"操作间隔: {app.config['BILI_DELAY_MIN_MS']}-{app.config['BILI_DELAY_MAX_MS']}ms"
    )

    if env == 'production':
        for warning in config_class.validate():
            print(f"⚠️  {warning}")

    from bili_backup.utils.crypto import get_crypto
    if get_crypto().is_secure:
        print("🔒 凭证加密保存: 已启用")
    else:
        print("⚠️  凭证加密保存: 未启用 (请设置 COOKIE_ENCRYPTION_KEY)")

    if os.environ.get('ADMIN_API_KEY'):
        print("🔒 清空操作: 需要管理员 API Key")
    else:
        print("⚠️  清空操作: 已禁用 (请设置 ADMIN_API_KEY)")

    print("=" * 60)

    # 同一进程内共享登录状态，不使用 reloader
    app.run(host='0.0.0.0', port=port, debug=(env == 'development'), use_reloader=False)
