class SingleApplication:
    pass
