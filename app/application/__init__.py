"""Application layer: DTOs, interfaces, workflow services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, storage, deadline notifier).
"""
