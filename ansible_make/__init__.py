"""
ansible-make: makefile includes and helpers for ansible workflows.

Ships three makefile includes (base, ansible, ansible-vault) and the
``ansible-make`` CLI they delegate to.

Main features:
- Self-documenting ``make help`` built from make's rule database
- ``assert-%`` / ``assertnot-%`` / ``require-%`` precondition guards
- Coloured target, section and stage announcements on stderr
- ansible-vault encrypt/decrypt/rekey/edit and piped secret helpers
- ansible-playbook provisioning, role testing and inventory inspection
"""

__version__ = "0.1.0"
