from abc import ABC, abstractmethod


class AbstractMessenger(ABC):
	"""Interface for clients that deliver a composed message to a fixed chat."""

	@abstractmethod
	async def send_message(self, text: str) -> None:
		"""Deliver already-formatted text to the configured chat.

		Args:
			text: Message body, escaped for the client's parse mode.

		Raises:
			UpstreamTransportAppError: If the API cannot be reached.
			UpstreamApplicationAppError: If the API reports a failure.
		"""
		...
