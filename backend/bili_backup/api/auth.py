"""
登录相关 API
"""
from flask import Blueprint, request

from ..errors import AuthError, BiliError
from ..extensions import db, session_manager
from ..models import StoredCredential
from ..utils.crypto import get_crypto
from ..utils.logger import get_logger
from ..utils.responses import ApiResponse, success_response
from ..utils.validators import validate_cookie_str
from ..middleware.auth import require_auth

auth_bp = Blueprint('auth', __name__)
logger = get_logger('auth')


def _remember(cookie_str: str, user_info: dict) -> bool:
    """保存凭证（仅在配置了加密密钥时），返回是否已保存"""
    if not get_crypto().is_secure:
        logger.warning("COOKIE_ENCRYPTION_KEY not set, credential not persisted")
        return False
    try:
        StoredCredential.activate(cookie_str, user_info)
        db.session.commit()
        return True
    except Exception as e:
        db.session.rollback()
        logger.error(f"保存凭证失败: {e}")
        return False


@auth_bp.route('/auth/login', methods=['POST'])
@require_auth
def login_with_cookie():
    """
    使用浏览器 Cookie 登录

    Request Body:
        - cookie: 完整 Cookie 字符串（需包含 SESSDATA、bili_jct、DedeUserID）
        - remember: 是否加密保存凭证，默认 true
    """
    data = request.json or {}
    is_valid, error_msg, cookie_str = validate_cookie_str(data.get('cookie'))
    if not is_valid:
        return ApiResponse.validation_error(error_msg)

    try:
        user_info = session_manager.login_with_cookie(cookie_str)
    except BiliError as e:
        logger.warning(f"登录失败: {e}")
        return ApiResponse.from_bili_error(e)

    saved = _remember(cookie_str, user_info) if data.get('remember', True) else False
    return success_response({**user_info, 'saved': saved}, f"登录成功：{user_info.get('uname')}")


@auth_bp.route('/auth/resume', methods=['POST'])
@require_auth
def resume_session():
    """使用已保存的凭证恢复登录"""
    record = StoredCredential.get_active()
    if not record:
        return ApiResponse.not_found('没有已保存的有效凭证')

    try:
        user_info = session_manager.login_with_cookie(record.get_cookie_str())
    except AuthError as e:
        record.mark_checked(False)
        db.session.commit()
        logger.info(f"已保存的凭证失效: {record.account_id}")
        return ApiResponse.from_bili_error(e)
    except BiliError as e:
        return ApiResponse.from_bili_error(e)

    record.mark_checked(True)
    db.session.commit()
    return success_response(user_info, f"已恢复登录：{user_info.get('uname')}")


@auth_bp.route('/auth/me', methods=['GET'])
@require_auth
def get_current_user():
    """获取当前登录用户信息"""
    try:
        return success_response(session_manager.get_user_info())
    except BiliError as e:
        return ApiResponse.from_bili_error(e)


@auth_bp.route('/auth/status', methods=['GET'])
def get_status():
    """登录状态（不访问平台）"""
    credential = session_manager.current_credential()
    return success_response({
        'logged_in': credential is not None,
        'account_id': credential.account_id if credential else None,
        'has_saved_credential': StoredCredential.get_active() is not None,
    })


@auth_bp.route('/auth/logout', methods=['POST'])
@require_auth
def logout():
    """
    退出登录

    Request Body:
        - forget: 同时删除已保存的凭证，默认 false
    """
    data = request.json or {}
    credential = session_manager.current_credential()
    session_manager.logout()

    if data.get('forget') and credential is not None:
        StoredCredential.query.filter_by(account_id=credential.account_id).delete()
        db.session.commit()
        logger.info(f"已删除保存的凭证: {credential.account_id}")

    return success_response(message='已退出登录')
