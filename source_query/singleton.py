# source_query/singleton.py


class Singleton:
    """
    Базовый класс для объектов, которые должны существовать в одном экземпляре
    на процесс (например, Logger). Повторный вызов конструктора возвращает
    уже созданный объект, поэтому __init__ наследника должен быть идемпотентным.
    """
    _instances = {}

    def __new__(cls, *args, **kwargs):
        if cls not in Singleton._instances:
            Singleton._instances[cls] = super().__new__(cls)
        return Singleton._instances[cls]

    @classmethod
    def reset_instance(cls):
        """Сбрасывает экземпляр (нужно тестам, чтобы пересоздать логгер с другим конфигом)."""
        Singleton._instances.pop(cls, None)
