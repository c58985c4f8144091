def exactly(backend, names, k):
    """First k variables true, the rest false"""
    return backend.and_([
        backend.bool_var(name) if i < k else backend.not_(backend.bool_var(name))
        for i, name in enumerate(names)
    ])
