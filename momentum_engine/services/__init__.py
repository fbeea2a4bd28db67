# services/__init__.py

"""
Репозитории состояния, метрики, таймер, сброс дня и экспорт/импорт.

Сервисы создаются и связываются объектом MomentumEngine.
"""
