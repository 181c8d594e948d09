from fantasy12.rate_limit import DEFAULT_RULES, RateLimiter, RateLimitRule


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_limiter(clock, max_requests=3, window=60):
    rule = RateLimitRule("strict", window, max_requests, "Too many requests. Wait 1 minute.")
    return RateLimiter(rules=(rule,), clock=clock)


def test_allows_up_to_the_limit_then_blocks():
    clock = FakeClock()
    limiter = make_limiter(clock)

    remaining = [limiter.allow("client", "strict").remaining for _ in range(3)]
    assert remaining == [2, 1, 0]

    blocked = limiter.allow("client", "strict")
    assert not blocked.allowed
    assert blocked.retry_after == 60
    assert blocked.headers()["Retry-After"] == "60"
    assert blocked.headers()["X-RateLimit-Remaining"] == "0"


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = make_limiter(clock, max_requests=1)

    assert limiter.allow("client", "strict").allowed
    clock.now += 30
    decision = limiter.allow("client", "strict")
    assert not decision.allowed
    assert decision.retry_after == 30

    clock.now += 31
    assert limiter.allow("client", "strict").allowed


def test_identities_are_counted_separately():
    limiter = make_limiter(FakeClock(), max_requests=1)
    assert limiter.allow("a", "strict").allowed
    assert limiter.allow("b", "strict").allowed
    assert not limiter.allow("a", "strict").allowed


def test_release_gives_back_a_hit():
    limiter = make_limiter(FakeClock(), max_requests=1)
    limiter.allow("client", "strict")
    limiter.release("client", "strict")
    assert limiter.allow("client", "strict").allowed


def test_allowed_decision_has_no_retry_after_header():
    decision = make_limiter(FakeClock()).allow("client", "strict")
    assert "Retry-After" not in decision.headers()
    assert decision.headers()["X-RateLimit-Limit"] == "3"


def test_expired_windows_are_cleaned_up():
    clock = FakeClock()
    limiter = make_limiter(clock, window=10)
    limiter.allow("old", "strict")

    clock.now += 120
    limiter.allow("new", "strict")

    assert ("strict", "old") not in limiter._windows
    assert ("strict", "new") in limiter._windows


def test_default_rules():
    rules = {rule.name: rule for rule in DEFAULT_RULES}
    assert (rules["general"].window_seconds, rules["general"].max_requests) == (900, 100)
    assert (rules["auth"].window_seconds, rules["auth"].max_requests) == (900, 5)
    assert rules["auth"].skip_successful
    assert (rules["creation"].window_seconds, rules["creation"].max_requests) == (3600, 10)
    assert (rules["strict"].window_seconds, rules["strict"].max_requests) == (60, 3)


def test_general_limit_is_applied_to_every_request(make_client):
    rules = tuple(
        RateLimitRule("general", 60, 2, "Too many requests.") if rule.name == "general" else rule
        for rule in DEFAULT_RULES
    )
    client = make_client(rate_limiter=RateLimiter(rules=rules))

    first = client.get("/")
    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert client.get("/").status_code == 200

    blocked = client.get("/")
    assert blocked.status_code == 429
    assert blocked.json()["error"] == "Too many requests."
    assert blocked.json()["retry_after"] >= 1
    assert "Retry-After" in blocked.headers
