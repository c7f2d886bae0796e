"""
concurrency.py — Concurrency Primitives

Small illustrations of the thread-level building blocks used by the order
workflow:
    • thread-per-task vs. a fixed worker pool for IO-bound work
    • a lock-guarded shared value with a validator and change watches
    • a transfer between two accounts guarded by ordered locks
    • an agent: a value updated asynchronously by one worker thread
    • a queue-fed worker pool that stops on a sentinel
    • racing operations against a timeout
    • a staged pipeline of threads connected by queues
    • chaining follow-up work onto futures
"""

import queue
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from order_service.logging_config import get_logger

log = get_logger(__name__)


def _io_task(task_id: int, delay: float = 0.01) -> int:
    time.sleep(delay)
    return task_id


def _delayed(value: Any, delay: float) -> Any:
    time.sleep(delay)
    return value


def compare_executors(task_count: int = 200, pool_size: int = 10, delay: float = 0.01) -> Tuple[float, float]:
    """
    Runs the same sleeping tasks on a small fixed pool and on one thread per task.

    Returns:
        Tuple[float, float]: Elapsed seconds for (fixed pool, thread per task).
    """
    start = time.perf_counter()
    with ThreadPoolExecutor(max_workers=pool_size) as executor:
        list(executor.map(lambda i: _io_task(i, delay), range(task_count)))
    pooled = time.perf_counter() - start

    start = time.perf_counter()
    threads = [threading.Thread(target=_io_task, args=(i, delay)) for i in range(task_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    per_task = time.perf_counter() - start
    return pooled, per_task


class SharedValue:
    """
    A value that can be updated atomically from several threads.

    Args:
        value: Initial value. It must satisfy the validator.
        validator (Callable, optional): Returns False for values the holder
            must never take. A rejected update raises ValueError and leaves
            the value unchanged.

    Watches registered with `add_watch` are called as `fn(key, old, new)`
    after every accepted change, on the updating thread.
    """

    def __init__(self, value: Any = 0, validator: Optional[Callable[[Any], bool]] = None):
        self._validator = validator
        self._check(value)
        self._value = value
        self._watches: Dict[str, Callable[[str, Any, Any], None]] = {}
        self._lock = threading.Lock()

    @property
    def value(self):
        return self._value

    def add_watch(self, key: str, fn: Callable[[str, Any, Any], None]):
        self._watches[key] = fn

    def remove_watch(self, key: str):
        self._watches.pop(key, None)

    def update(self, fn: Callable[[Any], Any]) -> Any:
        with self._lock:
            old = self._value
            new = fn(old)
            self._check(new)
            self._value = new
        self._notify(old, new)
        return new

    def compare_and_set(self, expected: Any, new: Any) -> bool:
        with self._lock:
            if self._value != expected:
                return False
            self._check(new)
            self._value = new
        self._notify(expected, new)
        return True

    def reset(self, new: Any) -> Any:
        return self.update(lambda _: new)

    def _check(self, value):
        if self._validator is not None and not self._validator(value):
            raise ValueError(f"Invalid value: {value!r}")

    def _notify(self, old, new):
        for key, fn in list(self._watches.items()):
            fn(key, old, new)


def concurrent_increments(threads: int = 10, increments: int = 1000) -> int:
    counter = SharedValue(0)
    with ThreadPoolExecutor(max_workers=threads) as executor:
        for _ in range(threads):
            executor.submit(lambda: [counter.update(lambda v: v + 1) for _ in range(increments)])
    return counter.value


def guarded_balance(operations: Iterable[float], opening: float = 100.0) -> Tuple[float, List[dict]]:
    """
    Applies deposits (positive) and withdrawals (negative) to a balance that
    may never drop below zero. Rejected operations are skipped.

    Returns:
        Tuple[float, List[dict]]: Final balance and one log entry per accepted change.
    """
    balance = SharedValue(opening, validator=lambda v: v >= 0)
    changes: List[dict] = []
    balance.add_watch("log", lambda key, old, new: changes.append(
        {"old": old, "new": new, "change": new - old}))
    for amount in operations:
        try:
            balance.update(lambda v: v + amount)
        except ValueError:
            log.debug(f"Rejected balance change of {amount}.")
    return balance.value, changes


class Account:

    def __init__(self, account_id: str, balance: float):
        self.id = account_id
        self.balance = balance
        self.lock = threading.Lock()


def transfer(source: Account, target: Account, amount: float) -> bool:
    """
    Moves `amount` from `source` to `target` if the source can cover it.
    Both locks are taken in id order so opposite transfers cannot deadlock.
    """
    first, second = sorted((source, target), key=lambda a: a.id)
    with first.lock, second.lock:
        if source.balance < amount:
            return False
        source.balance -= amount
        target.balance += amount
        return True


class Agent:
    """
    Holds a value that is changed asynchronously, one action at a time.

    `send(fn, *args)` queues `fn(value, *args)` on the agent's single worker
    thread and returns at once. Actions run in the order they were sent. If an
    action raises, the value is kept and `error_handler(agent, exc)` is called;
    a non-None return value of the handler replaces the value. Without a
    handler the error is logged and stored in `error`.
    """

    def __init__(self, value: Any, error_handler: Optional[Callable[["Agent", Exception], Any]] = None,
                 name: str = "agent"):
        self._value = value
        self.error_handler = error_handler
        self.error: Optional[Exception] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    @property
    def value(self):
        return self._value

    def send(self, fn: Callable, *args) -> Future:
        return self._executor.submit(self._apply, fn, args)

    def _apply(self, fn, args):
        try:
            self._value = fn(self._value, *args)
        except Exception as e:
            if self.error_handler is None:
                log.error(f"[Agent] Action {getattr(fn, '__name__', fn)} failed: {e}")
                self.error = e
                return
            replacement = self.error_handler(self, e)
            if replacement is not None:
                self._value = replacement

    def await_actions(self, timeout: Optional[float] = None):
        """Blocks until every action sent so far has run."""
        self._executor.submit(lambda: None).result(timeout=timeout)

    def shutdown(self):
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()


_STOP = object()


def worker_pool(jobs: Iterable, handler: Callable, workers: int = 4) -> List:
    """
    Feeds `jobs` to `workers` threads through a queue and collects the handler results.
    The order of results is not defined.
    """
    inbox: queue.Queue = queue.Queue()
    results: List = []
    results_lock = threading.Lock()

    def work():
        while True:
            job = inbox.get()
            if job is _STOP:
                break
            result = handler(job)
            with results_lock:
                results.append(result)

    threads = [threading.Thread(target=work, name=f"worker-{i}") for i in range(workers)]
    for thread in threads:
        thread.start()
    for job in jobs:
        inbox.put(job)
    for _ in threads:
        inbox.put(_STOP)
    for thread in threads:
        thread.join()
    return results


def first_completed(operations: Dict[str, Callable[[], Any]], timeout: float) -> Tuple[Optional[str], Any]:
    """
    Starts every operation and returns the name and result of the first to finish.

    Returns:
        Tuple[Optional[str], Any]: (None, None) when nothing finished within
        `timeout` seconds. Operations still running are left to finish in
        the background.

    Raises:
        Exception: Whatever the winning operation raised.
    """
    executor = ThreadPoolExecutor(max_workers=max(len(operations), 1), thread_name_prefix="race")
    futures = {executor.submit(fn): name for name, fn in operations.items()}
    done, _ = wait(futures, timeout=timeout, return_when=FIRST_COMPLETED)
    executor.shutdown(wait=False)
    if not done:
        return None, None
    winner = next(f for f in futures if f in done)
    return futures[winner], winner.result()


def run_pipeline(items: Iterable, stages: List[Callable[[Any], Any]]) -> List:
    """
    Passes every item through `stages`, each stage running on its own thread.

    A stage returning None drops the item. Items leave the pipeline in the
    order they entered it.
    """
    queues = [queue.Queue() for _ in range(len(stages) + 1)]

    def run_stage(stage, inbox, outbox):
        while True:
            item = inbox.get()
            if item is _STOP:
                outbox.put(_STOP)
                return
            result = stage(item)
            if result is not None:
                outbox.put(result)

    threads = [
        threading.Thread(target=run_stage, args=(stage, queues[i], queues[i + 1]), name=f"stage-{i}")
        for i, stage in enumerate(stages)
    ]
    for thread in threads:
        thread.start()
    for item in items:
        queues[0].put(item)
    queues[0].put(_STOP)

    results = []
    while True:
        item = queues[-1].get()
        if item is _STOP:
            break
        results.append(item)
    for thread in threads:
        thread.join()
    return results


def validate_reading(reading: dict) -> Optional[dict]:
    value = reading.get("value") if isinstance(reading, dict) else None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return reading
    return None


def square_reading(reading: dict) -> dict:
    return {**reading, "value": reading["value"] ** 2}


def complete_reading(reading: dict) -> dict:
    return {**reading, "status": "COMPLETED", "processed_at": time.time()}


READING_STAGES = [validate_reading, square_reading, complete_reading]


def then(future: Future, fn: Callable[[Any], Any]) -> Future:
    """
    Returns a future resolved with `fn(result)` once `future` is resolved.
    An exception of `future` or of `fn` is passed on to the returned future.
    """
    chained: Future = Future()

    def resolve(source: Future):
        try:
            chained.set_result(fn(source.result()))
        except Exception as e:
            chained.set_exception(e)

    future.add_done_callback(resolve)
    return chained


def main():
    print("=== Concurrency Examples ===")

    print("\n--- Fixed Pool vs Thread per Task ---")
    pooled, per_task = compare_executors()
    print(f"Fixed pool (10 workers): {pooled * 1000:.0f}ms")
    print(f"Thread per task: {per_task * 1000:.0f}ms")

    print("\n--- Lock-guarded Shared Value ---")
    print(f"10 threads x 1000 increments = {concurrent_increments()}")
    counter = SharedValue(2)
    print(f"compare_and_set(2 -> 12): {counter.compare_and_set(2, 12)}, "
          f"compare_and_set(2 -> 0): {counter.compare_and_set(2, 0)}, value: {counter.value}")

    print("\n--- Validator and Watches ---")
    final, changes = guarded_balance([50, -30, -200, -120])
    print(f"Final balance: {final}")
    for change in changes:
        print(f"  {change['old']} -> {change['new']} ({change['change']:+})")

    print("\n--- Coordinated Transfer ---")
    alice, bob = Account("alice", 100.0), Account("bob", 50.0)
    with ThreadPoolExecutor(max_workers=4) as executor:
        for _ in range(10):
            executor.submit(transfer, alice, bob, 10.0)
            executor.submit(transfer, bob, alice, 5.0)
    print(f"alice: {alice.balance:.2f}, bob: {bob.balance:.2f}, "
          f"total: {alice.balance + bob.balance:.2f}")

    print("\n--- Agent ---")
    events = []

    def reset_on_error(agent, error):
        events.append(f"error: {error}")
        return 0

    with Agent(0, error_handler=reset_on_error) as agent:
        agent.send(lambda n: n + 1)
        agent.send(lambda n: n + 10)
        agent.send(lambda n: 1 / 0)
        agent.send(lambda n: n + 5)
        agent.await_actions()
        print(f"Agent value: {agent.value}, events: {events}")

    print("\n--- Queue Worker Pool ---")
    squares = worker_pool(range(1, 11), lambda n: n * n)
    print(f"Squares: {sorted(squares)}")

    print("\n--- First Completed with Timeout ---")
    name, result = first_completed(
        {"fast": lambda: _delayed("fast result", 0.05), "slow": lambda: _delayed("slow result", 0.2)},
        timeout=0.15,
    )
    print(f"Winner: {name} ({result})")
    name, _ = first_completed({"slow": lambda: _delayed("slow result", 0.2)}, timeout=0.05)
    print(f"Slow only: {'timed out' if name is None else name}")

    print("\n--- Staged Pipeline ---")
    readings = [{"id": 1, "value": 5}, {"id": 2, "value": 10}, {"id": 3, "value": "invalid"}, {"id": 4, "value": 15}]
    for reading in run_pipeline(readings, READING_STAGES):
        print(f"  #{reading['id']}: {reading['value']} {reading['status']}")

    print("\n--- Chained Futures ---")
    source: Future = Future()
    doubled = then(then(source, lambda v: v + 1), lambda v: v * 2)
    source.set_result(5)
    print(f"(5 + 1) * 2 = {doubled.result(timeout=1)}")
    log.debug("Concurrency demo finished.")


if __name__ == '__main__':
    main()
