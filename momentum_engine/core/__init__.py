# core/__init__.py

"""
Модели данных, хранилище слотов и каталог значков/тем
"""
