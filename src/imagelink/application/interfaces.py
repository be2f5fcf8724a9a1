from abc import ABC, abstractmethod


class IFetcher(ABC):
    """Interface for the network component that retrieves remote resources."""

    @abstractmethod
    def fetch_bytes(self, url: str) -> bytes:
        """
        Return the body of a successful (2xx) GET for *url*.
        Raises InvalidURLError, NetworkError or InvalidResponseError.
        """
        pass

    @abstractmethod
    def fetch_text(self, url: str) -> str:
        """
        Return the body of a successful GET decoded as UTF-8.
        Additionally raises EncodingError when the body is not valid UTF-8.
        """
        pass
