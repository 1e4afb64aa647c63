"""
File grammars: OBJ, MTL and image decoding.
Pure functions from bytes to records; no fetching and no asset creation.
"""
