import random
import threading
import time

from taskbarrier import Barrier, ThreadPerTaskExecutor, TimeUnit
from taskbarrier.utils import setup_logging


def main() -> None:
    setup_logging("INFO")

    barrier = Barrier()
    session = barrier.session()
    ran = []
    lock = threading.Lock()

    def make_task(name: str):
        def task() -> None:
            time.sleep(random.uniform(0.005, 0.02))
            with lock:
                ran.append(name)

        return task

    print("▶ Registering three quick tasks...")
    for i in range(3):
        session.register(ThreadPerTaskExecutor(name_prefix=f"ctx{i}"), make_task(f"task-{i}"))

    ok = session.wait_for(1, TimeUnit.SECONDS)
    print(f"All finished in time: {ok} (ran: {sorted(ran)})")

    print("\n▶ Registering one slow task with a 100ms budget...")
    session.register(ThreadPerTaskExecutor(), lambda: time.sleep(5))
    result = session.run(100, TimeUnit.MILLISECONDS)
    print(f"Outcome: {result.outcome.value}")
    print(f"Outstanding: {result.outstanding_count}/{result.entry_count}")
    print(f"Elapsed: {result.elapsed_ms:.0f} ms")


if __name__ == "__main__":
    main()
