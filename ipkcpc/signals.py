import contextlib
import signal
import threading


class CancellationToken:
    """Set from the SIGINT handler, polled by the input loop."""

    def __init__(self):
        self._event = threading.Event()
        self._interruptible = False

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @contextlib.contextmanager
    def interruptible(self):
        """Let an interrupt abort the wrapped blocking call with KeyboardInterrupt.

        Python restarts a read cut short by a signal, so the handler has to
        raise to get out of it.
        """
        self._interruptible = True
        try:
            # a signal that arrived just before the flag was set
            if self.cancelled:
                raise KeyboardInterrupt
            yield
        finally:
            self._interruptible = False

    def interrupt(self):
        self.cancel()
        if self._interruptible:
            raise KeyboardInterrupt


def install_interrupt_handler(token: CancellationToken):
    """Route SIGINT to ``token``. Returns the handler that was replaced."""

    def handler(signum, frame):
        token.interrupt()

    return signal.signal(signal.SIGINT, handler)


def restore_interrupt_handler(previous):
    # None means the old handler was not installed from Python
    if previous is not None:
        signal.signal(signal.SIGINT, previous)
