"""Tests for the shared circuit breaker."""

import threading
import time

from scanners.breaker import CircuitBreaker


def wait_until(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_below_threshold_keeps_running():
    breaker = CircuitBreaker(threshold=10, cooldown=0.05)
    for _ in range(9):
        assert breaker.report_rate_limited() is False

    assert breaker.consecutive_errors == 9
    assert not breaker.paused
    assert breaker.cooldowns_started == 0


def test_success_resets_counter():
    breaker = CircuitBreaker(threshold=10, cooldown=0.05)
    for _ in range(9):
        breaker.report_rate_limited()
    breaker.report_success()

    assert breaker.consecutive_errors == 0
    for _ in range(9):
        breaker.report_rate_limited()
    assert not breaker.paused


def test_threshold_pauses_then_resumes():
    breaker = CircuitBreaker(threshold=10, cooldown=0.1)
    triggers = [breaker.report_rate_limited() for _ in range(10)]

    assert triggers == [False] * 9 + [True]
    assert breaker.paused
    assert breaker.cooldowns_started == 1

    # Further 403s during the cooldown do not start another one
    assert breaker.report_rate_limited() is False
    assert breaker.cooldowns_started == 1

    assert breaker.await_running(timeout=2.0)
    assert not breaker.paused
    assert breaker.consecutive_errors == 0


def test_await_running_times_out_while_paused():
    breaker = CircuitBreaker(threshold=1, cooldown=5)
    breaker.report_rate_limited()

    assert breaker.await_running(timeout=0.05) is False
    assert breaker.paused


def test_await_running_returns_immediately_when_running():
    breaker = CircuitBreaker(threshold=10, cooldown=5)
    assert breaker.await_running(timeout=0) is True


def test_concurrent_breach_starts_exactly_one_cooldown():
    workers = 20
    breaker = CircuitBreaker(threshold=10, cooldown=0.2)
    barrier = threading.Barrier(workers)
    triggered = []
    lock = threading.Lock()

    def hit():
        barrier.wait()
        result = breaker.report_rate_limited()
        with lock:
            triggered.append(result)

    threads = [threading.Thread(target=hit) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert triggered.count(True) == 1
    assert breaker.cooldowns_started == 1
    assert breaker.paused
    # Every report lands while paused or on the way up; overshoot stays bounded
    assert breaker.consecutive_errors <= breaker.threshold + workers - 1

    assert breaker.await_running(timeout=2.0)
    assert breaker.consecutive_errors == 0
    assert breaker.cooldowns_started == 1


def test_all_blocked_workers_wake_after_cooldown():
    cooldown = 0.2
    breaker = CircuitBreaker(threshold=3, cooldown=cooldown)
    for _ in range(3):
        breaker.report_rate_limited()
    assert breaker.paused

    woke = []
    lock = threading.Lock()

    def wait():
        breaker.await_running()
        with lock:
            woke.append(time.time())

    start = time.time()
    threads = [threading.Thread(target=wait, daemon=True) for _ in range(8)]
    for t in threads:
        t.start()

    time.sleep(cooldown / 4)
    assert woke == []

    assert wait_until(lambda: len(woke) == 8, timeout=cooldown + 2.0)
    assert all(t - start >= cooldown / 2 for t in woke)


def test_breaker_can_trip_again_after_cooldown():
    breaker = CircuitBreaker(threshold=2, cooldown=0.05)
    breaker.report_rate_limited()
    assert breaker.report_rate_limited() is True
    assert breaker.await_running(timeout=2.0)

    breaker.report_rate_limited()
    assert breaker.report_rate_limited() is True
    assert breaker.cooldowns_started == 2
    assert breaker.await_running(timeout=2.0)


def test_pause_and_resume_notices_are_printed(capsys):
    breaker = CircuitBreaker(threshold=1, cooldown=0.05)
    breaker.report_rate_limited()
    output = [capsys.readouterr().out]
    assert "Pausing for 0.05 seconds" in output[0]

    def resumed():
        output.append(capsys.readouterr().out)
        return "Resuming operations" in "".join(output)

    # The resume notice follows the state change
    assert wait_until(resumed)
