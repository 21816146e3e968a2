"""Explicit wiring of the booking core.

Each port type maps to a zero-argument factory. Shared bindings are
built on first resolve and then reused; the lock makes that first build
safe when several request threads resolve at once.

There is no process-global container: build one with
``Container.create_default()`` at startup and keep a handle to it. The
credential cache it owns is then a single instance per container.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Registry of factories keyed by port type.

    Usage:
        container = Container.create_default()
        booking = container.resolve(BookingService)

        # In tests, swap a binding before anything resolves it
        container.register(TokenSignerPort, lambda: FakeSigner())

    Attributes:
        config: Settings the default bindings are built from
    """

    config: AppConfig = field(default_factory=get_config)

    _providers: Dict[type[Any], Callable[[], Any]] = field(default_factory=dict, repr=False)
    _shared: set[type[Any]] = field(default_factory=set, repr=False)
    _instances: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Bind ``port_type`` to ``factory``, replacing any earlier binding.

        Args:
            port_type: Key to bind, usually a Protocol or a concrete class.
            factory: Builds the implementation.
            singleton: Reuse the first instance built instead of calling
                the factory on every resolve.
        """
        with self._lock:
            self._providers[port_type] = factory
            self._instances.pop(port_type, None)
            if singleton:
                self._shared.add(port_type)
            else:
                self._shared.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Return the implementation bound to ``port_type``.

        Raises:
            KeyError: If nothing is bound to the type.
        """
        with self._lock:
            factory = self._providers.get(port_type)
            if factory is None:
                raise KeyError(f"No binding for {port_type!r}")

            if port_type not in self._shared:
                return factory()
            if port_type not in self._instances:
                self._instances[port_type] = factory()
            return self._instances[port_type]

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._providers

    def clear_singletons(self) -> None:
        """Forget built instances; bindings stay in place."""
        with self._lock:
            self._instances.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Wire the production adapters.

        Quoting and compiling work without dispatch credentials; the API
        key is only checked when a token is first requested.

        Args:
            config: Settings to wire with; the cached settings by default.

        Returns:
            A container ready to resolve BookingService.
        """
        from .adapters.auth import CredentialCache, HttpTokenSigner, StaticTokenProvider
        from .adapters.dispatch import HttpDispatchClient
        from .orders.compiler import OrderCompiler
        from .ports.auth import TokenProviderPort, TokenSignerPort
        from .ports.dispatch import DispatchPort
        from .pricing.fares import FareCalculator
        from .services import BookingService

        config = config or get_config()
        container = cls(config=config)

        container.register(FareCalculator, lambda: FareCalculator(config.fares))
        container.register(OrderCompiler, lambda: OrderCompiler(config.orders))

        container.register(
            TokenSignerPort,
            lambda: HttpTokenSigner(config.dispatch, config.auth),
        )

        def token_provider() -> TokenProviderPort:
            if config.auth.dev_jwt:
                return StaticTokenProvider(config.auth.dev_jwt)
            return CredentialCache(
                signer=container.resolve(TokenSignerPort),
                config=config.auth,
            )

        container.register(TokenProviderPort, token_provider)

        container.register(
            DispatchPort,
            lambda: HttpDispatchClient(
                token_provider=container.resolve(TokenProviderPort),
                config=config.dispatch,
                company_id=config.orders.company_id,
            ),
        )

        container.register(
            BookingService,
            lambda: BookingService(
                fare_calculator=container.resolve(FareCalculator),
                order_compiler=container.resolve(OrderCompiler),
                dispatch=container.resolve(DispatchPort),
            ),
        )

        return container
