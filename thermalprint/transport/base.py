"""Base transport class for thermal printer connections."""

import abc


class BaseTransport(metaclass=abc.ABCMeta):
    """Abstract base class for all transport implementations.

    A transport is a write-only byte sink to an open printer connection.
    """

    address = None

    @abc.abstractmethod
    def write(self, data: bytes) -> int:
        """Write data to the transport.

        Args:
            data: Data to write

        Returns:
            int: Number of bytes written

        Raises:
            OSError: If the connection is broken
        """
        raise NotImplementedError

    @abc.abstractmethod
    def close(self):
        """Release the underlying connection. Calling it twice is harmless."""
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
