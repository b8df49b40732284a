def listify(value):
    """Turn a value that may be a single item or a sequence of items
    into a list.

    NCIP elements such as ItemId and UserId may appear once or many
    times; after parsing, a single occurrence is a mapping and several
    occurrences are a tuple of mappings.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
