"""
Event Scheduling Helpers
========================

Thin helpers over simpy for callback-style scheduling.

simpy processes equal-time events in creation order, so callbacks scheduled
for the same instant fire in the order they were registered.

Author: WBAN Jamming Team
"""

from typing import Callable

import simpy


def schedule_in(env: simpy.Environment, delay: float, callback: Callable, *args) -> simpy.Event:
    """
    Run callback(*args) after a delay of simulated time.

    Args:
        env: simpy environment
        delay: Delay in seconds, >= 0
        callback: Function to invoke
        *args: Arguments forwarded to the callback

    Returns:
        The underlying timeout event
    """
    if delay < 0:
        raise ValueError(f"Cannot schedule into the past (delay={delay})")
    event = env.timeout(delay)
    event.callbacks.append(lambda _event: callback(*args))
    return event


def schedule_at(env: simpy.Environment, when: float, callback: Callable, *args) -> simpy.Event:
    """Run callback(*args) at absolute simulated time `when`."""
    return schedule_in(env, when - env.now, callback, *args)
