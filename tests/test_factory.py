from admin_panel import create_app


def test_config():
    assert not create_app().testing
    assert create_app({'TESTING': True}).testing


def test_cascade_depth_config(monkeypatch):
    assert create_app({'TESTING': True}).config['CASCADE_MAX_DEPTH'] == 100
    monkeypatch.setenv('ADMIN_PANEL_CASCADE_MAX_DEPTH', '7')
    assert create_app({'TESTING': True}).config['CASCADE_MAX_DEPTH'] == 7


def test_root(client):
    response = client.get('/')
    assert response.data == b'Welcome to the admin panel API!'


def test_help(client):
    response = client.get('/help')
    assert response.status_code == 200
    assert b'/user/delete/<int:record_id>' in response.data
