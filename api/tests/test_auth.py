from edushare.services.auth_service import (
    create_access_token, decode_access_token, hash_password, verify_password,
)


def test_password_hashing():
    hashed = hash_password('password123')
    assert hashed != 'password123'
    assert verify_password('password123', hashed)
    assert not verify_password('wrong', hashed)
    assert not verify_password('password123', 'garbage')


async def test_register_and_me(client, register):
    headers, user_id = await register('alice', role='teacher')

    resp = await client.get('/api/auth/me', headers=headers)
    data = resp.json()
    assert data['id'] == user_id
    assert data['email'] == 'alice@example.com'
    assert data['role'] == 'teacher'
    assert data['weekly_score'] == 0
    assert data['lifetime_score'] == 0
    assert 'password_hash' not in data


async def test_register_duplicate_email(client, register):
    await register('alice')
    resp = await client.post('/api/auth/register', json={
        'username': 'alice2',
        'email': 'Alice@Example.com',
        'password': 'password123',
    })
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'User already exists'


async def test_register_duplicate_username(client, register):
    await register('alice')
    resp = await client.post('/api/auth/register', json={
        'username': 'alice',
        'email': 'other@example.com',
        'password': 'password123',
    })
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'Username already taken'


async def test_register_rejects_bad_role(client):
    resp = await client.post('/api/auth/register', json={
        'username': 'mallory',
        'email': 'mallory@example.com',
        'password': 'password123',
        'role': 'admin',
    })
    assert resp.status_code == 422


async def test_login(client, register):
    await register('alice')

    resp = await client.post('/api/auth/login', json={
        'email': 'alice@example.com', 'password': 'password123',
    })
    assert resp.status_code == 200
    assert decode_access_token(resp.json()['token'])['role'] == 'student'

    resp = await client.post('/api/auth/login', json={
        'email': 'alice@example.com', 'password': 'nope',
    })
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'Invalid Credentials'

    resp = await client.post('/api/auth/login', json={
        'email': 'nobody@example.com', 'password': 'password123',
    })
    assert resp.status_code == 400


async def test_me_rejects_bad_tokens(client):
    resp = await client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
    assert resp.status_code == 401
    assert resp.json()['detail'] == 'Token is not valid'

    resp = await client.get('/api/auth/me')
    assert resp.status_code in (401, 403)


async def test_me_for_deleted_user(client):
    class Ghost:
        id = 4242
        role = 'student'

    headers = {'Authorization': f'Bearer {create_access_token(Ghost())}'}
    resp = await client.get('/api/auth/me', headers=headers)
    assert resp.status_code == 401
    assert resp.json()['detail'] == 'User not found'
