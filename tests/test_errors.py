import logging

import pytest
from sqlalchemy.exc import OperationalError

from foodbridge import registry


@pytest.mark.parametrize('error', [
    OperationalError('SELECT', {}, Exception('disk I/O error')),
    RuntimeError('boom'),
])
def test_unexpected_error_renders_internal(monkeypatch, caplog, client,
                                           restaurant, error):
    def broken(*args, **kwargs):
        raise error

    monkeypatch.setattr(registry, 'paginate', broken)

    with caplog.at_level(logging.ERROR, logger='foodbridge'):
        response = client.get('/donations/my', headers=restaurant.headers)

    assert response.status_code == 500
    assert response.get_json() == {'success': False,
                                   'message': 'Internal server error'}
    assert any(record.exc_info for record in caplog.records
               if record.name == 'foodbridge')


def test_session_usable_after_internal_error(monkeypatch, client,
                                             restaurant):
    monkeypatch.setattr(registry, 'paginate', lambda *a, **kw: 1 / 0)
    client.get('/donations/my', headers=restaurant.headers)
    monkeypatch.undo()

    response = client.get('/donations/my', headers=restaurant.headers)

    assert response.status_code == 200
