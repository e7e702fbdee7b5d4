"""
Access Mediator application package.

Components:
- mediator: AccessMediator, the thread-safe synchronous mediator
- async_mediator: AsyncAccessMediator for asyncio callers
- policy: admission policies and the rule engine
- cache: in-process response memo table
- delegate: delegate contract, built-in delegates and lazy construction
- factory: assembly from MediatorConfig
"""
