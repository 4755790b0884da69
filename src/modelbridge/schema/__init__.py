"""Schema resolution.

Resolvers map a model name to its field descriptors. ``SchemaRegistry`` is the
in-process implementation; anything satisfying ``SchemaResolver`` can be
injected instead.
"""
