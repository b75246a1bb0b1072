"""
Dependency injection container for the leak probe
"""

from dependency_injector import containers, providers

from .managers.process_manager import ProcessManager
from .managers.state_manager import StateManager
from .services.host_service import HostService
from .services.logging_service import LoggingService
from .services.probe_service import LeakProbe
from .services.sampler_service import NativeMemorySampler


class Container(containers.DeclarativeContainer):
    """Main DI container for the application"""

    # Configuration - will be overridden with actual Config object
    config = providers.Object(None)

    # Services (Singletons)
    logging_service = providers.Singleton(LoggingService)

    # Managers (Singletons - shared across the app)
    state_manager = providers.Singleton(StateManager)

    process_manager = providers.Singleton(
        ProcessManager, config=config, logging_service=logging_service
    )

    sampler = providers.Singleton(
        NativeMemorySampler, config=config, logging_service=logging_service
    )

    host_service = providers.Singleton(
        HostService, config=config, logging_service=logging_service
    )

    # Probe
    leak_probe = providers.Factory(
        LeakProbe,
        config=config,
        process_manager=process_manager,
        sampler=sampler,
        host_service=host_service,
        state_manager=state_manager,
        logging_service=logging_service,
    )
