"""appforge -- application scaffolding engine.

Turns a declarative ``AppSpec`` (archetype, pages, features, database, auth,
UI kit, deployment target) into a complete multi-file project and packages
it as a zip archive.
"""

__version__ = "0.1.0"
