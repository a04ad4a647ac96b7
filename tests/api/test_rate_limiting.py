from middleware.rate_limiter import limiter


def test_rate_limiter_disabled_in_testing():
    """Verify rate limiter is disabled during tests."""
    assert limiter.enabled is False


async def test_can_make_multiple_requests_in_tests(client, registered_user):
    """Verify rate limiting doesn't interfere with tests."""
    # Make 10 login requests (normally limited to 5/min)
    for _ in range(10):
        response = await client.post("/auth/login", json={
            "email": "alice@example.com",
            "password": "pw12345678"
        })
        assert response.status_code == 200


async def test_login_is_rate_limited_when_enabled(client, registered_user):
    limiter.reset()
    limiter.enabled = True
    try:
        statuses = []
        for _ in range(6):
            response = await client.post("/auth/login", json={
                "email": "alice@example.com",
                "password": "pw12345678"
            })
            statuses.append(response.status_code)
    finally:
        limiter.enabled = False
        limiter.reset()

    assert statuses[:5] == [200] * 5
    assert statuses[5] == 429
