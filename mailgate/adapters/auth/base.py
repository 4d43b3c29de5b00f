from abc import ABC, abstractmethod


class AbstractCredentialVerifier(ABC):
	"""Interface for checking an operator's login form credentials."""

	@abstractmethod
	def verify(self, username: str, password: str) -> bool:
		"""Return True when the username/password pair is accepted.

		Args:
			username: Submitted login name.
			password: Submitted password.

		Returns:
			bool: Whether the operator may open a session.
		"""
		...
