"""
The CONTROLLER layer runs an OBJ load: it fetches dependencies, calls the
grammars in ``formats`` and turns their records into the assets of ``model``.
"""
