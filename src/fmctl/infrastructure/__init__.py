"""Infrastructure layer — preset files and document files on disk.

Adapters here implement the collaborator protocols from
:mod:`fmctl.services.ports`. They may import from the domain layer but
never from services, commands, or output.
"""
