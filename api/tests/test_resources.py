import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.services.storage import LocalStorage, StorageError, file_extension, sanitize_filename

PDF_BYTES = b'%PDF-1.4 lecture notes'


async def _upload(client, headers, name='notes.pdf', **form):
    data = {'title': 'Week 1 Notes', 'subject': 'math', 'semester': '3', 'tags': 'algebra, exam'}
    data.update(form)
    return await client.post(
        '/api/resources/upload',
        files={'file': (name, PDF_BYTES, 'application/pdf')},
        data=data,
        headers=headers,
    )


def _stored_key(storage: LocalStorage) -> str:
    path = next(p for p in storage.root.rglob('*') if p.is_file())
    return str(path.relative_to(storage.root))


async def test_upload_list_download(client, register):
    headers, user_id = await register('alice')

    resp = await _upload(client, headers)
    assert resp.status_code == 201, resp.text
    resource = resp.json()
    assert resource['title'] == 'Week 1 Notes'
    assert resource['subject'] == 'math'
    assert resource['semester'] == 3
    assert resource['tags'] == ['algebra', 'exam']
    assert resource['format'] == 'pdf'
    assert resource['size_bytes'] == len(PDF_BYTES)
    assert resource['uploaded_by']['id'] == user_id
    assert resource['file_url'] == f'/api/resources/{resource["id"]}/download'

    resp = await client.get('/api/resources')
    page = resp.json()
    assert page['total'] == 1
    assert page['page'] == 1
    assert page['totalPages'] == 1
    assert page['limit'] == 6
    assert [r['id'] for r in page['items']] == [resource['id']]

    resp = await client.get(resource['file_url'])
    assert resp.status_code == 200
    assert resp.content == PDF_BYTES
    assert 'attachment' in resp.headers['content-disposition']
    assert 'notes.pdf' in resp.headers['content-disposition']


async def test_upload_defaults_and_unsafe_name(client, register):
    headers, _ = await register('alice')

    resp = await _upload(client, headers, name='../../etc/"pass wd".pdf', title='', subject='', semester='', tags='')
    assert resp.status_code == 201, resp.text
    resource = resp.json()
    assert resource['original_filename'] == 'pass wd.pdf'
    assert resource['title'] == 'pass wd.pdf'
    assert resource['subject'] == 'general'
    assert resource['semester'] is None
    assert resource['tags'] == []


async def test_upload_validation(client, register):
    headers, _ = await register('alice')

    resp = await client.post('/api/resources/upload', data={'title': 'x'}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'No file uploaded'

    resp = await _upload(client, headers, semester='third')
    assert resp.status_code == 400


async def test_upload_requires_auth(client):
    resp = await client.post(
        '/api/resources/upload', files={'file': ('a.pdf', PDF_BYTES, 'application/pdf')},
    )
    assert resp.status_code in (401, 403)


async def test_failed_record_insert_removes_stored_file(client, register, storage, monkeypatch):
    headers, _ = await register('alice')

    async def failing_flush(self, objects=None):
        raise OperationalError('INSERT INTO resources', {}, Exception('disk full'))

    monkeypatch.setattr(AsyncSession, 'flush', failing_flush)

    resp = await _upload(client, headers)
    assert resp.status_code == 500
    assert resp.json()['detail'] == 'Error uploading file'
    assert not [p for p in storage.root.rglob('*') if p.is_file()]


async def test_pagination(client, register):
    headers, _ = await register('alice')
    for i in range(7):
        await _upload(client, headers, title=f'Notes {i}')

    resp = await client.get('/api/resources', params={'page': 2})
    page = resp.json()
    assert page['total'] == 7
    assert page['totalPages'] == 2
    assert [r['title'] for r in page['items']] == ['Notes 0']


async def test_download_missing_object(client, register, storage):
    headers, _ = await register('alice')
    resource = (await _upload(client, headers)).json()
    storage.delete(_stored_key(storage))

    resp = await client.get(resource['file_url'])
    assert resp.status_code == 502

    resp = await client.get('/api/resources/999/download')
    assert resp.status_code == 404


async def test_delete_is_teacher_only(client, register, storage):
    student, _ = await register('alice')
    teacher, _ = await register('eve', role='teacher')
    resource = (await _upload(client, student)).json()

    resp = await client.delete(f'/api/resources/{resource["id"]}', headers=student)
    assert resp.status_code == 403

    resp = await client.delete(f'/api/resources/{resource["id"]}', headers=teacher)
    assert resp.status_code == 200
    assert resp.json() == {'message': 'Deleted'}
    assert not [p for p in storage.root.rglob('*') if p.is_file()]

    resp = await client.get(resource['file_url'])
    assert resp.status_code == 404

    resp = await client.delete(f'/api/resources/{resource["id"]}', headers=teacher)
    assert resp.status_code == 404


class TestSanitizeFilename:

    def test_strips_directories(self):
        assert sanitize_filename('../../secret.txt') == 'secret.txt'
        assert sanitize_filename('C:\\Users\\me\\notes.pdf') == 'notes.pdf'

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename('a;b|c.pdf') == 'a_b_c.pdf'
        assert sanitize_filename('"quoted".pdf') == 'quoted.pdf'

    def test_decodes_form_escapes(self):
        assert sanitize_filename('%22quoted%22.pdf') == 'quoted.pdf'
        assert sanitize_filename('notes%0D%0A.pdf') == 'notes.pdf'
        assert sanitize_filename('100%25 done.pdf') == '100_25 done.pdf'

    def test_falls_back_to_default(self):
        assert sanitize_filename(None) == 'file'
        assert sanitize_filename('...', default='resource-1') == 'resource-1'

    def test_truncates_keeping_extension(self):
        name = sanitize_filename('x' * 300 + '.pdf')
        assert len(name) == 150
        assert name.endswith('.pdf')


def test_file_extension():
    assert file_extension('Notes.PDF') == 'pdf'
    assert file_extension('README') == ''


def test_storage_rejects_escaping_keys(tmp_path):
    storage = LocalStorage(tmp_path)
    assert storage.resolve('../outside.txt') is None
    with pytest.raises(StorageError):
        storage.delete('../outside.txt')
