"""Interface IdGenerator - Puerto para generación de identificadores únicos."""

import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """
    Puerto para generación de identificadores únicos.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def new_rental_id(self) -> str:
        """
        Genera el identificador de una renta nueva.

        Returns:
            String único (UUID v4 en la implementación real).
        """
        raise NotImplementedError

    @abstractmethod
    def new_idempotency_key(self) -> str:
        """
        Genera una clave de idempotencia para un intento de cobro.

        Returns:
            String único para usar como idempotency key.
        """
        raise NotImplementedError


class RealIdGenerator(IdGenerator):
    """Implementación real que genera UUIDs aleatorios."""

    def new_rental_id(self) -> str:
        return str(uuid.uuid4())

    def new_idempotency_key(self) -> str:
        return str(uuid.uuid4())


class FakeIdGenerator(IdGenerator):
    """
    Implementación fake para testing.

    Genera valores predecibles: r1, r2, ... y idem-000001, idem-000002, ...
    """

    def __init__(self, rental_prefix: str = "r"):
        self._rental_prefix = rental_prefix
        self._rental_counter = 0
        self._idem_counter = 0

    def new_rental_id(self) -> str:
        self._rental_counter += 1
        return f"{self._rental_prefix}{self._rental_counter}"

    def new_idempotency_key(self) -> str:
        self._idem_counter += 1
        return f"idem-{self._idem_counter:06d}"

    def reset(self) -> None:
        """Reinicia todos los contadores."""
        self._rental_counter = 0
        self._idem_counter = 0
