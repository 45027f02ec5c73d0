"""Storage backends implementing :class:`~cqrs_ddd_crud.ports.IBackendAdapter`."""
