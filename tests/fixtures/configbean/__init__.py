class ConfigBeanApplication:
    pass
