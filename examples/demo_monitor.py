import sys
import time

from dirwatch.monitor import Monitor
from dirwatch.thread_manager import ThreadManager
from dirwatch.utils import spawn_consumer_worker

path = sys.argv[1] if len(sys.argv) > 1 else "."

# Create a monitor backed by watchdog and start watching.
monitor = Monitor.create(stream_buffer=16)
monitor.start(path)
print(f"Watching {monitor.watched_path} for 30 seconds...")

# Print every event as it is published.
manager = ThreadManager()
manager.register_thread(spawn_consumer_worker(monitor.events, lambda event: print(event.format())))

time.sleep(30)

monitor.stop()
manager.shutdown(timeout=2)
print("Thread statuses after stopping:", manager.get_all_statuses())

# The log keeps everything recorded while running.
for event in monitor.log():
    print(event.to_dict())
