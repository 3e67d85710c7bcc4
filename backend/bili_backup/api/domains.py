"""
备份 / 还原 / 清空 / 导入导出 API

所有数据类型共用同一组路由：/api/<domain>/<action>
domain: following, followers, blacklist, favorites, bangumi, cinema, toview, history
"""
from flask import Blueprint, request

from ..errors import BiliError
from ..services.backup_service import BackupService
from ..utils.logger import get_logger
from ..utils.responses import ApiResponse, success_response
from ..utils.validators import (
    validate_delay_range,
    validate_domain,
    validate_filename,
    validate_restore_options,
    validate_tag_name,
)
from ..middleware.auth import require_admin, require_auth

domains_bp = Blueprint('domains', __name__)
logger = get_logger('domains')


def _check_domain(domain):
    is_valid, error_msg, _ = validate_domain(domain)
    return None if is_valid else ApiResponse.not_found(error_msg)


@domains_bp.route('/<domain>/backup', methods=['POST'])
@require_auth
def backup(domain):
    """
    备份指定数据

    Request Body:
        - export: 是否同时导出到备份目录，默认 false
        - filename: 导出文件名（可选，默认 <domain>.json）
        - delay_range: [min_ms, max_ms]（可选）
    """
    invalid = _check_domain(domain)
    if invalid:
        return invalid

    data = request.json or {}
    ok, error_msg, delay_range = validate_delay_range(data.get('delay_range'))
    if not ok:
        return ApiResponse.validation_error(error_msg)
    ok, error_msg, filename = validate_filename(data.get('filename'))
    if not ok:
        return ApiResponse.validation_error(error_msg)

    try:
        items = BackupService.backup(domain, delay_range)
        result = {'items': items, 'count': len(items)}
        if data.get('export'):
            result.update(BackupService.export(domain, items, filename))
    except BiliError as e:
        logger.error(f"备份 {domain} 失败: {e}")
        return ApiResponse.from_bili_error(e)

    return success_response(result, f'备份完成，共 {len(items)} 条')


@domains_bp.route('/<domain>/restore', methods=['POST'])
@require_auth
def restore(domain):
    """
    还原数据到当前登录账号

    Request Body:
        - items: 备份数据数组；省略时从 filename 指定的备份文件读取
        - filename: 备份文件名（可选）
        - options: {batch_size, continue_on_error, delay_range, create_missing_groups, clear_existing}
    """
    invalid = _check_domain(domain)
    if invalid:
        return invalid

    data = request.json or {}
    ok, error_msg, options = validate_restore_options(data.get('options'))
    if not ok:
        return ApiResponse.validation_error(error_msg)

    items = data.get('items')
    if items is not None and not isinstance(items, list):
        return ApiResponse.validation_error('items 必须是数组')
    ok, error_msg, filename = validate_filename(data.get('filename'))
    if not ok:
        return ApiResponse.validation_error(error_msg)

    try:
        if items is None:
            items = BackupService.import_items(domain, filename)
        outcome = BackupService.restore(domain, items, options)
    except BiliError as e:
        logger.error(f"还原 {domain} 失败: {e}")
        return ApiResponse.from_bili_error(e)

    return success_response(outcome.to_dict(), outcome.message)


@domains_bp.route('/<domain>/clear', methods=['POST'])
@require_admin
def clear(domain):
    """
    清空指定数据（不可恢复）

    Request Body:
        - bulk: 使用平台提供的一键清空（仅 history / toview），默认 false
        - delay_range: [min_ms, max_ms]（可选）
    """
    invalid = _check_domain(domain)
    if invalid:
        return invalid

    data = request.json or {}
    ok, error_msg, delay_range = validate_delay_range(data.get('delay_range'))
    if not ok:
        return ApiResponse.validation_error(error_msg)

    try:
        outcome = BackupService.clear(domain, bulk=bool(data.get('bulk')), delay_range=delay_range)
    except BiliError as e:
        logger.error(f"清空 {domain} 失败: {e}")
        return ApiResponse.from_bili_error(e)

    return success_response(outcome.to_dict(), outcome.message)


@domains_bp.route('/<domain>/export', methods=['POST'])
@require_auth
def export(domain):
    """
    导出到备份目录

    Request Body:
        - items: 要导出的数据（可选，省略时先执行一次备份）
        - filename: 文件名（可选）
    """
    invalid = _check_domain(domain)
    if invalid:
        return invalid

    data = request.json or {}
    items = data.get('items')
    if items is not None and not isinstance(items, list):
        return ApiResponse.validation_error('items 必须是数组')
    ok, error_msg, filename = validate_filename(data.get('filename'))
    if not ok:
        return ApiResponse.validation_error(error_msg)

    try:
        result = BackupService.export(domain, items, filename)
    except BiliError as e:
        return ApiResponse.from_bili_error(e)

    return success_response(result, f"已导出 {result['count']} 条")


@domains_bp.route('/<domain>/import', methods=['POST'])
@require_auth
def import_items(domain):
    """
    从备份目录读取数据

    Request Body:
        - filename: 文件名（可选，默认 <domain>.json）
    """
    invalid = _check_domain(domain)
    if invalid:
        return invalid

    data = request.json or {}
    ok, error_msg, filename = validate_filename(data.get('filename'))
    if not ok:
        return ApiResponse.validation_error(error_msg)

    try:
        items = BackupService.import_items(domain, filename)
    except BiliError as e:
        return ApiResponse.from_bili_error(e)

    return success_response({'items': items, 'count': len(items)}, f'已读取 {len(items)} 条')


@domains_bp.route('/archives', methods=['GET'])
@require_auth
def list_archives():
    """列出备份目录中的文件"""
    return success_response(BackupService.list_archives())


@domains_bp.route('/following/tags', methods=['GET'])
@require_auth
def list_relation_tags():
    """获取当前账号的关注分组"""
    try:
        tags = BackupService.list_relation_tags()
    except BiliError as e:
        return ApiResponse.from_bili_error(e)
    return success_response([{'tagid': tag.id, 'name': tag.name} for tag in tags])


@domains_bp.route('/following/tags', methods=['POST'])
@require_auth
def create_relation_tag():
    """
    创建关注分组

    Request Body:
        - name: 分组名称
    """
    data = request.json or {}
    is_valid, error_msg, name = validate_tag_name(data.get('name'))
    if not is_valid:
        return ApiResponse.validation_error(error_msg)

    try:
        tag_id = BackupService.create_relation_tag(name)
    except BiliError as e:
        return ApiResponse.from_bili_error(e)
    return success_response({'tagid': tag_id, 'name': name}, '分组创建成功')
