from vruksha_admin import performance_logger


def test_backend_call_stats():
    performance_logger.log_backend_call('GET', '/categories', 120, 200)
    performance_logger.log_backend_call('GET', '/categories', 80, 500)
    stats = performance_logger.get_call_stats()['GET /categories']
    assert stats['calls'] == 2
    assert stats['avg_time'] == 100
    assert stats['max_time'] == 120
    assert stats['errors'] == 1


def test_slow_calls_are_written(logs_dir):
    performance_logger.log_backend_call('GET', '/orders/all', 900, 200)
    summary = performance_logger.get_log_summary()
    assert summary['slow_calls.log']['exists']
    assert not summary['performance.log']['exists']


def test_session_events_and_clear(logs_dir):
    performance_logger.log_session_event('login', 'admin@x.com')
    performance_logger.log_session_event('logout', 'admin@x.com')
    assert performance_logger.get_log_summary()['session.log']['lines'] == 2

    performance_logger.clear_logs()
    assert not performance_logger.get_log_summary()['session.log']['exists']


def test_route_timing_is_logged(client, logs_dir):
    client.get('/login')
    with open(logs_dir / 'performance.log', encoding='utf-8') as f:
        assert 'Open login' in f.read()
