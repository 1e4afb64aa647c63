"""
The MODEL layer contains pure data structures: parsed records, emitted assets,
errors, the byte fetch capability and the asset registry.
It has NO knowledge of the OBJ/MTL grammar or of how a load is orchestrated.
"""
