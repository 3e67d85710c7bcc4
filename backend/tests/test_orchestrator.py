"""
Orchestrator Tests

Tests for the generic backup / restore / clear engine and its outcome.
"""
import pytest

from conftest import FakeClient, envelope, make_response


def _adapters():
    from bili_backup.errors import RemoteError
    from bili_backup.services.sync.orchestrator import ContainerAdapter, DomainAdapter, GroupTag

    class RecordingAdapter(DomainAdapter):
        """In-memory domain keyed by ``mid``; mids in ``fail_on`` are rejected."""

        name = 'fake'
        label = '测试'
        grouped = True
        supports_bulk_clear = True

        def __init__(self, fail_on=(), groups=None, fail_create=(), fail_assign=False, existing=None):
            self.fail_on = set(fail_on)
            self.groups = dict(groups or {})
            self.fail_create = set(fail_create)
            self.fail_assign = fail_assign
            self.existing = list(existing or [])
            self.applied = []
            self.removed = []
            self.created_groups = []
            self.assigned = []
            self.bulk_cleared = False

        def fetch(self, client):
            return list(self.existing)

        def apply(self, client, item, target=None):
            self.applied.append(item['mid'])
            if item['mid'] in self.fail_on:
                raise RemoteError(22001, '不能关注自己')

        def remove(self, client, item):
            if item['mid'] in self.fail_on:
                raise RemoteError(22002, '操作失败')
            self.removed.append(item['mid'])

        def bulk_clear(self, client):
            self.bulk_cleared = True

        def describe(self, item):
            return f'用户 "{item.get("uname", "")}" (mid: {item["mid"]})'

        def groups_of(self, item):
            return list(item.get('tag_names') or [])

        def list_groups(self, client):
            return [GroupTag(id=tag_id, name=name) for name, tag_id in self.groups.items()]

        def create_group(self, client, name):
            if name in self.fail_create:
                raise RemoteError(22106, '分组名重复')
            tag_id = 100 + len(self.groups)
            self.groups[name] = tag_id
            self.created_groups.append(name)
            return tag_id

        def assign_groups(self, client, item, group_ids):
            if self.fail_assign:
                raise RemoteError(22104, '分组不存在')
            self.assigned.append((item['mid'], sorted(group_ids)))

    class FolderAdapter(ContainerAdapter):
        """Folders as ``{'title', 'default', 'medias'}`` records."""

        name = 'folders'
        label = '收藏夹'

        def __init__(self, default_used=0, fail_create=(), default_error=None):
            self.default_used = default_used
            self.fail_create = set(fail_create)
            self.default_error = default_error
            self.created = []
            self.placed = {}

        def containers(self, entities):
            from bili_backup.services.sync.orchestrator import ContainerSpec
            return [
                (ContainerSpec(title=f['title'], is_default=f.get('default', False)), list(f['medias']))
                for f in entities
            ]

        def resolve_default(self, client):
            if self.default_error is not None:
                raise self.default_error
            return 'default', self.default_used

        def create_container(self, client, spec):
            if spec.title in self.fail_create:
                raise RemoteError(11010, '收藏夹数量已达上限')
            self.created.append(spec.title)
            return spec.title

        def apply(self, client, item, target=None):
            self.placed.setdefault(target, []).append(item['id'])

        def describe(self, item):
            return f'视频 (id: {item["id"]})'

    return RecordingAdapter, FolderAdapter


def _waits(transport):
    return transport.delay.get_stats()['waits']


class TestRestoreErrorPolicy:
    """Tests for continue_on_error."""

    def test_abort_on_first_failure(self, logged_in_transport, sample_relations):
        """Test a failure on item 3 leaves items 4 and 5 untouched."""
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(fail_on={3})
        outcome = SyncOrchestrator(logged_in_transport).restore(
            adapter, sample_relations, RestoreOptions(continue_on_error=False, create_missing_groups=False)
        )

        assert outcome.success_count == 2
        assert outcome.failed_count == 1
        assert adapter.applied == [1, 2, 3]
        assert outcome.is_aborted
        assert outcome.to_dict()['state'] == 'aborted'
        assert outcome.failed_items == ['用户 "carol" (mid: 3): API错误 [22001]: 不能关注自己']
        assert _waits(logged_in_transport) == 2

    def test_continue_on_error(self, logged_in_transport, sample_relations):
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(fail_on={3})
        outcome = SyncOrchestrator(logged_in_transport).restore(
            adapter, sample_relations, RestoreOptions(continue_on_error=True, create_missing_groups=False)
        )

        assert outcome.success_count == 4
        assert outcome.failed_count == 1
        assert adapter.applied == [1, 2, 3, 4, 5]
        data = outcome.to_dict()
        assert data['state'] == 'completed'
        assert data['total_count'] == 5
        assert data['end_time'] is not None

    def test_no_failures_reports_none(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        outcome = SyncOrchestrator(logged_in_transport).restore(RecordingAdapter(), [{'mid': 1}])
        assert outcome.to_dict()['failed_items'] is None

    @pytest.mark.parametrize('batch_size', [0, 21, -1])
    def test_batch_size_bounds(self, logged_in_transport, batch_size):
        """Test batch sizes outside 1..20 are rejected before any request."""
        from bili_backup.errors import ParamError
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter()
        with pytest.raises(ParamError):
            SyncOrchestrator(logged_in_transport).restore(adapter, [{'mid': 1}], RestoreOptions(batch_size=batch_size))
        assert adapter.applied == []

    def test_batches_cover_all_items(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter()
        items = [{'mid': i} for i in range(45)]
        outcome = SyncOrchestrator(logged_in_transport).restore(adapter, items, RestoreOptions(batch_size=20))

        assert adapter.applied == list(range(45))
        assert outcome.batch_index == 2
        assert outcome.success_count == 45


class TestGroupMapping:
    """Tests for name-based group remapping."""

    def test_creates_missing_groups(self, logged_in_transport, sample_relations):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(groups={'游戏': 7})
        outcome = SyncOrchestrator(logged_in_transport).restore(adapter, sample_relations)

        assert adapter.created_groups == ['音乐']
        assert outcome.group_mapping == {'游戏': 7, '音乐': 101}
        assert adapter.assigned == [(1, [7]), (2, [7, 101]), (5, [101])]

    def test_mapping_is_idempotent(self, logged_in_transport, sample_relations):
        """Test a second run against the same account creates nothing."""
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter()
        orchestrator = SyncOrchestrator(logged_in_transport)
        client = logged_in_transport.pinned()

        first = orchestrator.map_groups(client, adapter, sample_relations)
        created = list(adapter.created_groups)
        second = orchestrator.map_groups(client, adapter, sample_relations)

        assert created == ['游戏', '音乐']
        assert adapter.created_groups == created
        assert first == second

    def test_create_disabled(self, logged_in_transport, sample_relations):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(groups={'游戏': 7})
        mapping = SyncOrchestrator(logged_in_transport).map_groups(
            logged_in_transport.pinned(), adapter, sample_relations, create_missing=False
        )

        assert mapping == {'游戏': 7}
        assert adapter.created_groups == []

    def test_failed_creation_skips_group(self, logged_in_transport, sample_relations):
        """Test a group that cannot be created is dropped without failing items."""
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(fail_create={'音乐'})
        outcome = SyncOrchestrator(logged_in_transport).restore(adapter, sample_relations)

        assert '音乐' not in outcome.group_mapping
        assert outcome.success_count == 5
        assert adapter.assigned == [(1, [100]), (2, [100])]

    def test_assign_failure_is_not_item_failure(self, logged_in_transport, sample_relations):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(groups={'游戏': 7, '音乐': 8}, fail_assign=True)
        outcome = SyncOrchestrator(logged_in_transport).restore(adapter, sample_relations)

        assert outcome.success_count == 5
        assert outcome.failed_count == 0

    def test_listing_failure_propagates(self, logged_in_transport, sample_relations):
        from bili_backup.errors import RemoteError
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter()

        def broken_listing(client):
            raise RemoteError(-101, '账号未登录')
        adapter.list_groups = broken_listing

        with pytest.raises(RemoteError):
            SyncOrchestrator(logged_in_transport).restore(adapter, sample_relations)
        assert adapter.applied == []


class TestContainerRestore:
    """Tests for capacity splitting of container domains."""

    def test_split_by_capacity(self):
        from bili_backup.services.sync.orchestrator import split_by_capacity

        chunks = split_by_capacity(list(range(2500)), 1000, 1000)
        assert [len(c) for c in chunks] == [1000, 1000, 500]
        assert split_by_capacity([1, 2, 3], 0, 2) == [[], [1, 2], [3]]
        assert split_by_capacity([1, 2], -5, 2) == [[], [1, 2]]

    def test_oversized_folder_overflows(self, logged_in_transport):
        """Test 1200 items become "Music" (1000) and "Music (2)" (200)."""
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        _, FolderAdapter = _adapters()

        adapter = FolderAdapter()
        folders = [{'title': 'Music', 'medias': [{'id': i} for i in range(1200)]}]
        outcome = SyncOrchestrator(logged_in_transport).restore(adapter, folders)

        assert adapter.created == ['Music', 'Music (2)']
        assert len(adapter.placed['Music']) == 1000
        assert len(adapter.placed['Music (2)']) == 200
        assert outcome.success_count == 1200
        assert outcome.total_count == 1200

    def test_default_folder_remaining_capacity(self, logged_in_transport):
        """Test the default folder takes only what fits, the rest overflows."""
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        _, FolderAdapter = _adapters()

        adapter = FolderAdapter(default_used=49990)
        folders = [{'title': '默认收藏夹', 'default': True, 'medias': [{'id': i} for i in range(15)]}]
        SyncOrchestrator(logged_in_transport).restore(adapter, folders)

        assert len(adapter.placed['default']) == 10
        assert adapter.created == ['默认收藏夹 (2)']
        assert len(adapter.placed['默认收藏夹 (2)']) == 5

    def test_container_creation_failure(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        _, FolderAdapter = _adapters()

        adapter = FolderAdapter(fail_create={'A'})
        folders = [
            {'title': 'A', 'medias': [{'id': 1}, {'id': 2}]},
            {'title': 'B', 'medias': [{'id': 3}]},
        ]
        outcome = SyncOrchestrator(logged_in_transport).restore(
            adapter, folders, RestoreOptions(continue_on_error=True)
        )

        assert outcome.failed_count == 2
        assert outcome.success_count == 1
        assert outcome.failed_items[0].startswith('"A"')

        aborted = SyncOrchestrator(logged_in_transport).restore(FolderAdapter(fail_create={'A'}), folders)
        assert aborted.is_aborted
        assert aborted.success_count == 0

    def test_default_folder_lookup_failure_continues(self, logged_in_transport):
        """Test a missing default folder fails its items while other folders still restore."""
        from bili_backup.errors import RemoteError
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        _, FolderAdapter = _adapters()

        adapter = FolderAdapter(default_error=RemoteError(-404, '未找到默认收藏夹'))
        folders = [
            {'title': 'B', 'medias': [{'id': 3}]},
            {'title': '默认收藏夹', 'default': True, 'medias': [{'id': 1}, {'id': 2}]},
        ]
        outcome = SyncOrchestrator(logged_in_transport).restore(
            adapter, folders, RestoreOptions(continue_on_error=True)
        )

        assert outcome.to_dict()['state'] == 'completed'
        assert outcome.success_count == 1
        assert outcome.failed_count == 2
        assert outcome.failed_items == ['"默认收藏夹" (2 条): API错误 [-404]: 未找到默认收藏夹']
        assert adapter.placed == {'B': [3]}

    def test_default_folder_lookup_failure_aborts_before_changes(self, logged_in_transport):
        from bili_backup.errors import RemoteError
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        _, FolderAdapter = _adapters()

        adapter = FolderAdapter(default_error=RemoteError(-404, '未找到默认收藏夹'))
        folders = [
            {'title': 'B', 'medias': [{'id': 3}]},
            {'title': '默认收藏夹', 'default': True, 'medias': [{'id': 1}, {'id': 2}]},
        ]
        outcome = SyncOrchestrator(logged_in_transport).restore(adapter, folders)

        assert outcome.is_aborted
        assert outcome.failed_count == 2
        assert adapter.created == []
        assert adapter.placed == {}


class TestBackupAndClear:
    """Tests for backup and clear."""

    def test_backup_requires_login(self, transport):
        from bili_backup.errors import AuthError
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        with pytest.raises(AuthError):
            SyncOrchestrator(transport).backup(RecordingAdapter(existing=[{'mid': 1}]))

    def test_backup_returns_items(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        items = SyncOrchestrator(logged_in_transport).backup(RecordingAdapter(existing=[{'mid': 1}, {'mid': 2}]))
        assert items == [{'mid': 1}, {'mid': 2}]

    def test_clear_is_best_effort(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(fail_on={2}, existing=[{'mid': 1}, {'mid': 2}, {'mid': 3}])
        outcome = SyncOrchestrator(logged_in_transport).clear(adapter)

        assert adapter.removed == [1, 3]
        assert outcome.success_count == 2
        assert outcome.failed_count == 1
        assert outcome.to_dict()['state'] == 'completed'

    def test_bulk_clear(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(existing=[{'mid': 1}])
        SyncOrchestrator(logged_in_transport).clear(adapter, bulk=True)

        assert adapter.bulk_cleared
        assert adapter.removed == []

    def test_clear_existing_before_restore(self, logged_in_transport):
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator
        RecordingAdapter, _ = _adapters()

        adapter = RecordingAdapter(existing=[{'mid': 9}])
        SyncOrchestrator(logged_in_transport).restore(adapter, [{'mid': 1}], RestoreOptions(clear_existing=True))

        assert adapter.removed == [9]
        assert adapter.applied == [1]

    def test_unsupported_operations(self, logged_in_transport):
        from bili_backup.errors import ParamError
        from bili_backup.services.domains import FollowerAdapter, HistoryAdapter
        from bili_backup.services.sync.orchestrator import SyncOrchestrator

        orchestrator = SyncOrchestrator(logged_in_transport)
        with pytest.raises(ParamError):
            orchestrator.restore(FollowerAdapter(), [{'mid': 1}])
        with pytest.raises(ParamError):
            orchestrator.clear(FollowerAdapter())
        with pytest.raises(ParamError):
            orchestrator.restore(HistoryAdapter(), [])


class TestDomainAdapters:
    """Tests for the concrete adapters against a fake client."""

    def test_following_fetch_annotates_tag_names(self):
        from bili_backup.services.domains import FollowingAdapter

        client = FakeClient([
            [{'tagid': 0, 'name': '默认分组'}, {'tagid': 11, 'name': '游戏'}],
            {'list': [{'mid': 1, 'tag': [11]}, {'mid': 2, 'tag': None}], 'total': 2},
        ])
        relations = FollowingAdapter().fetch(client)

        assert relations[0]['tag_names'] == ['游戏']
        assert relations[1]['tag_names'] == []
        assert client.gets[1][1]['vmid'] == '10086'

    def test_following_apply_and_assign(self):
        from bili_backup.services.client import endpoints
        from bili_backup.services.domains import FollowingAdapter

        client = FakeClient()
        adapter = FollowingAdapter()
        adapter.apply(client, {'mid': 42})
        adapter.assign_groups(client, {'mid': 42}, [7, 8])

        assert client.posts[0] == (endpoints.RELATION_MODIFY, {'fid': 42, 'act': 1, 're_src': 11})
        assert client.posts[1] == (endpoints.TAG_ADD_USERS, {'fids': 42, 'tagids': '7,8'})

    def test_blacklist_uses_block_acts(self):
        from bili_backup.services.domains import BlacklistAdapter

        client = FakeClient()
        BlacklistAdapter().apply(client, {'mid': 1})
        BlacklistAdapter().remove(client, {'mid': 1})

        assert [data['act'] for _, data in client.posts] == [5, 6]

    def test_favorites_containers(self):
        from bili_backup.services.domains import FavoritesAdapter

        folders = [
            {'id': 1, 'title': '默认收藏夹', 'attr': 0, 'medias': [{'id': 10}]},
            {'id': 2, 'title': '私密', 'attr': 3, 'intro': 'x', 'medias': []},
            {'id': 3, 'title': '公开', 'attr': 2, 'medias': None},
        ]
        plan = FavoritesAdapter().containers(folders)

        assert [spec.is_default for spec, _ in plan] == [True, False, False]
        assert [spec.privacy for spec, _ in plan] == [0, 1, 0]
        assert plan[0][1] == [{'id': 10}]
        assert plan[2][1] == []

    def test_favorites_apply_targets_folder(self):
        from bili_backup.services.client import endpoints
        from bili_backup.services.domains import FavoritesAdapter

        client = FakeClient()
        FavoritesAdapter().apply(client, {'id': 99, 'type': 2}, target=555)

        assert client.posts == [(endpoints.FAV_RESOURCE_DEAL, {
            'rid': 99, 'type': 2, 'add_media_ids': 555, 'del_media_ids': '',
        })]

    def test_bangumi_is_signed(self):
        from bili_backup.services.domains import BangumiAdapter

        client = FakeClient([{'list': [{'season_id': 1}], 'total': 1}])
        adapter = BangumiAdapter(2)

        assert adapter.fetch(client) == [{'season_id': 1}]
        assert adapter.name == 'cinema'
        assert client.gets[0][1]['type'] == 2
        assert client.gets[0][2] is True

    def test_history_kid(self):
        from bili_backup.services.domains.history import history_kid

        assert history_kid({'history': {'oid': 5, 'business': 'pgc'}}) == 'pgc_5'
        assert history_kid({'history': {'oid': 6}}) == 'archive_6'

    def test_unknown_domain(self):
        from bili_backup.errors import ParamError
        from bili_backup.services.domains import get_adapter

        with pytest.raises(ParamError):
            get_adapter('moments')


class TestMalformedEntities:
    """Tests for entities and replies missing the fields a mutation needs."""

    def test_entity_without_id_continues(self, logged_in_transport, http_session):
        from bili_backup.services.domains import BlacklistAdapter
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator

        items = [{'mid': 1}, {'mid': 2}, {'uname': 'no-mid'}, {'mid': 4}, {'mid': 5}]
        outcome = SyncOrchestrator(logged_in_transport).restore(
            BlacklistAdapter(), items, RestoreOptions(continue_on_error=True)
        )

        posts = [c for c in http_session.request.call_args_list if c.args[0] == 'POST']
        assert len(posts) == 4
        assert outcome.success_count == 4
        assert outcome.failed_count == 1
        assert outcome.failed_items == ['用户 "no-mid" (mid: None): 参数错误: 条目缺少字段 mid']
        assert outcome.to_dict()['state'] == 'completed'
        assert _waits(logged_in_transport) == 5

    def test_entity_without_id_aborts(self, logged_in_transport, http_session):
        from bili_backup.services.domains import BlacklistAdapter
        from bili_backup.services.sync.orchestrator import SyncOrchestrator

        items = [{'mid': 1}, {'uname': 'no-mid'}, {'mid': 3}]
        outcome = SyncOrchestrator(logged_in_transport).restore(BlacklistAdapter(), items)

        assert outcome.is_aborted
        assert outcome.success_count == 1
        assert outcome.failed_count == 1
        assert http_session.request.call_count == 1

    def test_non_object_entity(self, logged_in_transport):
        from bili_backup.services.domains import ToViewAdapter
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator

        outcome = SyncOrchestrator(logged_in_transport).restore(
            ToViewAdapter(), [{'aid': 1}, 'oops'], RestoreOptions(continue_on_error=True)
        )

        assert outcome.success_count == 1
        assert outcome.failed_items == ["无效条目 'oops': 参数错误: 条目缺少字段 aid"]

    def test_clear_skips_target_without_id(self, logged_in_transport, http_session):
        from bili_backup.services.domains import ToViewAdapter
        from bili_backup.services.sync.orchestrator import SyncOrchestrator

        queue = [{'aid': 1, 'title': 'a'}, {'title': 'no aid'}, {'aid': 3, 'title': 'c'}]

        def respond(method, url, **kwargs):
            if method == 'GET':
                return make_response(envelope({'list': queue}))
            return make_response(envelope({}))
        http_session.request.side_effect = respond

        outcome = SyncOrchestrator(logged_in_transport).clear(ToViewAdapter())

        deleted = [c.kwargs['data']['aid'] for c in http_session.request.call_args_list if c.args[0] == 'POST']
        assert deleted == [1, 3]
        assert outcome.success_count == 2
        assert outcome.failed_count == 1
        assert outcome.to_dict()['state'] == 'completed'

    def test_folder_create_without_id(self, logged_in_transport, http_session):
        """Test a folder-create reply with null data fails that folder's items."""
        from bili_backup.services.domains import FavoritesAdapter
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator

        http_session.request.return_value = make_response(envelope(None))
        folders = [
            {'id': 11, 'title': 'A', 'attr': 2, 'medias': [{'id': 1, 'title': 'x'}]},
            {'id': 12, 'title': 'B', 'attr': 2, 'medias': [{'id': 2, 'title': 'y'}]},
        ]
        outcome = SyncOrchestrator(logged_in_transport).restore(
            FavoritesAdapter(), folders, RestoreOptions(continue_on_error=True)
        )

        assert outcome.failed_count == 2
        assert outcome.success_count == 0
        assert outcome.failed_items == [
            '收藏夹 "A" (1 条): API错误 [-1]: 无法获取收藏夹ID',
            '收藏夹 "B" (1 条): API错误 [-1]: 无法获取收藏夹ID',
        ]
        assert http_session.request.call_count == 2

    def test_folder_archive_must_hold_objects(self, logged_in_transport, http_session):
        from bili_backup.errors import ParamError
        from bili_backup.services.domains import FavoritesAdapter
        from bili_backup.services.sync.orchestrator import RestoreOptions, SyncOrchestrator

        with pytest.raises(ParamError):
            SyncOrchestrator(logged_in_transport).restore(
                FavoritesAdapter(), ['oops'], RestoreOptions(clear_existing=True)
            )
        assert http_session.request.call_count == 0

    def test_group_create_without_id(self):
        from bili_backup.errors import RemoteError
        from bili_backup.services.domains import FollowingAdapter

        with pytest.raises(RemoteError) as exc:
            FollowingAdapter().create_group(FakeClient(), '游戏')
        assert exc.value.message == '无法获取分组ID'


class TestBatchOutcome:
    """Tests for failure bookkeeping."""

    def test_failed_items_not_truncated(self):
        from bili_backup.errors import RemoteError
        from bili_backup.services.sync.outcome import BatchOutcome

        outcome = BatchOutcome(total_count=600)
        for mid in range(600):
            outcome.record_failure(f'用户 (mid: {mid})', RemoteError(22001, '失败'))

        data = outcome.complete().to_dict()
        assert data['failed_count'] == 600
        assert len(data['failed_items']) == 600
        assert data['failed_items'][-1] == '用户 (mid: 599): API错误 [22001]: 失败'

    def test_grouped_failure_names_count(self):
        from bili_backup.errors import RemoteError
        from bili_backup.services.sync.outcome import BatchOutcome

        outcome = BatchOutcome(total_count=5)
        outcome.record_failures(5, '收藏夹 "A"', RemoteError(11010, '收藏夹数量已达上限'))

        assert outcome.failed_count == 5
        assert outcome.failed_items == ['收藏夹 "A" (5 条): API错误 [11010]: 收藏夹数量已达上限']
