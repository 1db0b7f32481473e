"""Infrastructure layer — vault file system, note editing, user surfaces.

This layer depends on stdlib, the domain layer, and third-party libs
(aiofiles, watchdog). It must never import from services, commands,
or output.
"""
