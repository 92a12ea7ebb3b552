import json
import sys
import time
from typing import Dict, List, Sequence
from crosswalk.kernel.scheduler import VirtualScheduler
from crosswalk.kernel.signal_controller import SignalController

def run_headless_experiment(duration_ms: int, press_times_ms: Sequence[int]) -> List[Dict]:
    """Runs the controller on a simulated clock and records every state change."""
    scheduler = VirtualScheduler()
    controller = SignalController(scheduler, strict=True)
    timeline: List[Dict] = []

    def record(view):
        timeline.append({
            "timeMs": scheduler.now(),
            "color": view.color.value,
            "mode": controller.state.mode.value,
            "walkActive": view.walkActive
        })

    controller.subscribe(record)
    controller.start()
    record(controller.current_view())

    for press in sorted(press_times_ms):
        if press > duration_ms:
            break
        scheduler.advance(press - scheduler.now())
        controller.request_walk()

    scheduler.advance(duration_ms - scheduler.now())
    controller.shutdown()
    return timeline

if __name__ == "__main__":
    if len(sys.argv) > 2:
        output_path = sys.argv[1]
        presses = [int(arg) for arg in sys.argv[3:]]
        start_time = time.time()
        results = run_headless_experiment(int(sys.argv[2]), presses)
        print(f"Experiment finished in {time.time() - start_time:.4f}s ({len(results)} changes)")
        with open(output_path, 'w') as f:
            json.dump(results, f, indent=2)
    else:
        print("Usage: python -m crosswalk.experiments.run_experiment <output> <duration_ms> [press_ms ...]")
