from abc import ABC, abstractmethod


class AbstractIdentityResolver(ABC):
	"""Interface for turning an opaque bearer credential into a caller id."""

	@abstractmethod
	async def resolve(self, credential: str) -> str:
		"""Resolve the credential.

		Args:
			credential: Bearer token exactly as presented by the client.

		Returns:
			str: The caller's user id.

		Raises:
			AuthenticationAppError: If the credential is unknown, expired or invalid.
			InternalAppError: If the identity provider cannot be reached.
		"""
		...

	async def aclose(self) -> None:
		"""Release pooled connections (no-op by default)."""
		return None
