"""
登录凭证存储模型
Cookie 只以 Fernet 加密形式落盘
"""
from datetime import datetime
from ..extensions import db


class StoredCredential(db.Model):
    """
    已保存的平台登录凭证

    使用 get_cookie_str() 和 set_cookie_str() 访问 Cookie，
    这些方法会自动处理加密/解密。同一时间最多一条 is_active 记录。
    """
    __tablename__ = 'credentials'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    encrypted_cookie = db.Column(db.Text, nullable=False)

    # 用户信息（来自 nav 接口）
    account_id = db.Column(db.String(32), index=True)
    uname = db.Column(db.String(128))
    face = db.Column(db.String(512))

    # 状态
    is_active = db.Column(db.Boolean, default=True)
    is_valid = db.Column(db.Boolean, default=True)

    # 时间戳
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_checked = db.Column(db.DateTime)

    def get_cookie_str(self) -> str:
        """获取解密后的 Cookie 字符串，密钥不匹配时抛出 AuthError"""
        from ..utils.crypto import decrypt_cookie
        return decrypt_cookie(self.encrypted_cookie)

    def set_cookie_str(self, cookie_str: str) -> None:
        """加密并保存 Cookie，未配置密钥时抛出 ParamError"""
        from ..utils.crypto import encrypt_cookie
        self.encrypted_cookie = encrypt_cookie(cookie_str)

    def mark_checked(self, is_valid: bool) -> None:
        self.is_valid = is_valid
        self.last_checked = datetime.utcnow()

    @classmethod
    def get_active(cls):
        return cls.query.filter_by(is_active=True, is_valid=True).first()

    @classmethod
    def activate(cls, cookie_str: str, user_info: dict) -> 'StoredCredential':
        """
        保存并激活凭证，同账号的旧记录会被复用
        调用方负责提交事务
        """
        account_id = str(user_info.get('mid') or '')
        record = cls.query.filter_by(account_id=account_id).first() if account_id else None
        if record is None:
            cls.query.update({'is_active': False})
            record = cls(account_id=account_id)
            record.set_cookie_str(cookie_str)
            db.session.add(record)
        else:
            cls.query.filter(cls.id != record.id).update({'is_active': False})
            record.set_cookie_str(cookie_str)

        record.uname = user_info.get('uname')
        record.face = user_info.get('face')
        record.is_active = True
        record.mark_checked(True)
        return record

    def to_dict(self):
        """转换为字典（不包含 Cookie）"""
        return {
            'id': self.id,
            'account_id': self.account_id,
            'uname': self.uname,
            'face': self.face,
            'is_active': self.is_active,
            'is_valid': self.is_valid,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_checked': self.last_checked.isoformat() if self.last_checked else None,
        }

    def __repr__(self):
        return f'<StoredCredential {self.uname or self.account_id}>'
