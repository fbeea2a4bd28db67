#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Momentum Engine v1.0 - Command Line Interface
Командная строка для работы с движком

Версия: 1.0.0
Дата: 2026-10-19
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from momentum_engine.config import EngineConfig
from momentum_engine.core.models import IF_THEN_PRESETS, MomentumError
from momentum_engine.engine import MomentumEngine
from momentum_engine.services.timer_service import format_time
from momentum_engine.utils.logger import setup_logger

logger = logging.getLogger(__name__)

def _flag(value: str) -> bool:
    value = value.lower()
    if value in ("on", "true", "yes", "1"):
        return True
    if value in ("off", "false", "no", "0"):
        return False
    raise argparse.ArgumentTypeError(f"ожидается on/off, получено {value!r}")

def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))

# ===== ЖУРНАЛ И ПРИВЫЧКИ =====

def cmd_log(engine: MomentumEngine, args) -> None:
    entry = engine.log_activity(" ".join(args.text))
    print(f"📝 {entry.id} {entry.text}")

def cmd_entries(engine: MomentumEngine, args) -> None:
    entries = engine.list_entries()[:args.limit]
    if not entries:
        print("Журнал пуст")
        return
    for entry in entries:
        print(f"{entry.id}  {entry.timestamp}  {entry.text}")

def cmd_rm_entry(engine: MomentumEngine, args) -> None:
    if engine.remove_entry(args.id):
        print(f"🗑️ Запись {args.id} удалена")
    else:
        print(f"Запись {args.id} не найдена")

def cmd_habits(engine: MomentumEngine, args) -> None:
    for habit in engine.list_habits():
        mark = "✅" if habit.completed else "⬜"
        print(f"{mark} {habit.id}  {habit.label}")

def cmd_toggle(engine: MomentumEngine, args) -> None:
    habit = engine.toggle_habit(args.id)
    if habit is None:
        print(f"Привычка {args.id} не найдена")
        return
    mark = "✅" if habit.completed else "⬜"
    print(f"{mark} {habit.label}")

def cmd_rename_habit(engine: MomentumEngine, args) -> None:
    habit = engine.rename_habit(args.id, args.label)
    if habit is None:
        print(f"Привычка {args.id} не найдена")
        return
    print(f"✏️ {habit.id}  {habit.label}")

# ===== ЦЕЛИ И ПЛАНЫ =====

def cmd_goal(engine: MomentumEngine, args) -> None:
    if args.goal_cmd == "add":
        goal = engine.add_goal(args.text, args.deadline)
        print(f"🎯 {goal.id}  {goal.text}")
    elif args.goal_cmd == "toggle":
        goal = engine.toggle_goal(args.id)
        print(f"{'✅' if goal.completed else '⬜'} {goal.text}" if goal else f"Цель {args.id} не найдена")
    elif args.goal_cmd == "rm":
        print(f"🗑️ Цель {args.id} удалена" if engine.remove_goal(args.id) else f"Цель {args.id} не найдена")
    else:
        for goal in engine.goals.list_all():
            deadline = f" (до {goal.deadline})" if goal.deadline else ""
            print(f"{'✅' if goal.completed else '⬜'} {goal.id}  {goal.text}{deadline}")

def cmd_plan(engine: MomentumEngine, args) -> None:
    if args.plan_cmd == "add":
        plan = engine.add_plan(args.trigger, args.action)
        print(f"💡 {plan.id}  IF {plan.trigger} THEN {plan.action}")
    elif args.plan_cmd == "preset":
        plan = engine.apply_preset(args.index)
        print(f"💡 {plan.id}  IF {plan.trigger} THEN {plan.action}")
    elif args.plan_cmd == "rm":
        print(f"🗑️ План {args.id} удален" if engine.remove_plan(args.id) else f"План {args.id} не найден")
    elif args.presets:
        for index, (trigger, action) in enumerate(IF_THEN_PRESETS):
            print(f"[{index}] IF {trigger} THEN {action}")
    else:
        for plan in engine.plans.list_all():
            print(f"{plan.id}  IF {plan.trigger} THEN {plan.action}")

def cmd_woop(engine: MomentumEngine, args) -> None:
    fields = {name: getattr(args, name) for name in ("wish", "outcome", "obstacle", "plan")
              if getattr(args, name) is not None}
    woop = engine.update_woop(**fields) if fields else engine.woop.woop
    _print_json(woop.to_dict())

def cmd_vision(engine: MomentumEngine, args) -> None:
    if args.text is not None:
        engine.set_vision(args.text)
    print(engine.vision.text)

def cmd_note(engine: MomentumEngine, args) -> None:
    note = engine.set_future_cost_note(args.text, args.day)
    print(f"📌 {note}" if note else "Заметка удалена")

def cmd_day(engine: MomentumEngine, args) -> None:
    summary = engine.day_summary(args.day or engine.today_key())
    print(f"📅 {summary.day.isoformat()}: {summary.actions_count} действий")
    for entry in summary.entries:
        print(f"  • {entry.text}")
    if summary.habits:
        print(f"  Привычки: {', '.join(summary.habits)}")
    if summary.future_cost_note:
        print(f"  Цена бездействия: {summary.future_cost_note}")

# ===== ПРОГРЕСС =====

def cmd_stats(engine: MomentumEngine, args) -> None:
    peak_day, peak_count = engine.peak_day()
    stats = {
        "points": engine.points.value,
        "streak": engine.streak(),
        "longestStreak": engine.longest_streak(),
        "totalActions": len(engine.activity_log),
        "averagePerActiveDay": round(engine.average_per_active_day(), 2),
        "peakDay": peak_day,
        "peakCount": peak_count,
        "velocity": engine.velocity_series(),
        "analytics": engine.analytics.data.to_dict()
    }
    if args.json:
        _print_json(stats)
        return

    print(f"⭐ Очки: {stats['points']}")
    print(f"🔥 Серия: {stats['streak']} (лучшая {stats['longestStreak']})")
    print(f"📊 Всего действий: {stats['totalActions']}, в среднем {stats['averagePerActiveDay']} в день")
    if peak_day:
        print(f"🏔️ Пиковый день: {peak_day} ({peak_count})")
    print("📈 " + "  ".join(f"{label}:{count}" for label, count in stats["velocity"]))

def cmd_badges(engine: MomentumEngine, args) -> None:
    for status in engine.evaluate_badges():
        mark = status.badge.icon if status.unlocked else "🔒"
        print(f"{mark} {status.badge.name}: {status.badge.description} ({status.progress}/{status.target})")

def cmd_themes(engine: MomentumEngine, args) -> None:
    for theme, unlocked in engine.evaluate_themes():
        active = " *" if theme.color.lower() == engine.theme.color.lower() else ""
        lock = "" if unlocked else f" 🔒 {theme.unlock_points} очков"
        print(f"{theme.color}  {theme.name}{lock}{active}")

def cmd_theme(engine: MomentumEngine, args) -> None:
    if engine.select_theme(args.color):
        print(f"🎨 Активная тема: {engine.theme.color}")
    else:
        print(f"🔒 Тема {args.color} недоступна")

# ===== ФОКУС И НАСТРОЙКИ =====

def cmd_focus(engine: MomentumEngine, args) -> None:
    if args.now:
        engine.complete_focus_session()
        print(f"⚡ Сессия засчитана, очков: {engine.points.value}")
        return

    engine.timer.start()
    try:
        while not engine.timer.poll():
            print(f"\r⏰ {format_time(engine.timer.remaining_seconds())}", end="", flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        engine.timer.pause()
        print(f"\n⏸️ Прервано, осталось {format_time(engine.timer.remaining_seconds())}")
        return
    print(f"\n⚡ Сессия завершена, очков: {engine.points.value}")

def cmd_spark(engine: MomentumEngine, args) -> None:
    print(f"✨ {engine.spark_task()}")

def cmd_reminders(engine: MomentumEngine, args) -> None:
    enabled = engine.set_reminders(args.state)
    print(f"🔔 Напоминания: {'вкл' if enabled else 'выкл'}")

def cmd_shield(engine: MomentumEngine, args) -> None:
    enabled = engine.set_audio_shield(args.state)
    print(f"🎧 Аудио-щит: {'вкл' if enabled else 'выкл'}")

# ===== ЭКСПОРТ / ИМПОРТ =====

def cmd_export(engine: MomentumEngine, args) -> None:
    if args.stdout:
        _print_json(engine.export())
        return
    path = engine.export_to_file(args.dir)
    print(f"📤 {path}")

def cmd_export_csv(engine: MomentumEngine, args) -> None:
    path = engine.export_entries_csv(args.output)
    print(f"📊 {path}")

def cmd_import(engine: MomentumEngine, args) -> None:
    applied = engine.import_from_file(args.path)
    print(f"📥 Применены поля: {', '.join(applied) or '-'}")

def cmd_run(engine: MomentumEngine, args) -> None:
    """Фоновая работа: проверка смены дня до Ctrl+C"""
    engine.start()
    print("🚀 Движок запущен, Ctrl+C для остановки")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Остановка")

# ===== ПАРСЕР =====

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="momentum", description="Momentum Engine")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("log", help="Записать действие")
    p.add_argument("text", nargs="+")
    p.set_defaults(func=cmd_log)

    p = sub.add_parser("entries", help="Журнал активности")
    p.add_argument("--limit", type=int, default=20)
    p.set_defaults(func=cmd_entries)

    p = sub.add_parser("rm-entry", help="Удалить запись")
    p.add_argument("id")
    p.set_defaults(func=cmd_rm_entry)

    sub.add_parser("habits", help="Список привычек").set_defaults(func=cmd_habits)

    p = sub.add_parser("toggle", help="Отметить привычку")
    p.add_argument("id")
    p.set_defaults(func=cmd_toggle)

    p = sub.add_parser("rename-habit", help="Переименовать привычку")
    p.add_argument("id")
    p.add_argument("label")
    p.set_defaults(func=cmd_rename_habit)

    goal = sub.add_parser("goal", help="Мини-цели")
    goal_sub = goal.add_subparsers(dest="goal_cmd", required=True)
    p = goal_sub.add_parser("add")
    p.add_argument("text")
    p.add_argument("--deadline", default="")
    p = goal_sub.add_parser("toggle")
    p.add_argument("id")
    p = goal_sub.add_parser("rm")
    p.add_argument("id")
    goal_sub.add_parser("list")
    goal.set_defaults(func=cmd_goal)

    plan = sub.add_parser("plan", help="Правила «если-то»")
    plan_sub = plan.add_subparsers(dest="plan_cmd", required=True)
    p = plan_sub.add_parser("add")
    p.add_argument("trigger")
    p.add_argument("action")
    p = plan_sub.add_parser("preset")
    p.add_argument("index", type=int)
    p = plan_sub.add_parser("rm")
    p.add_argument("id")
    p = plan_sub.add_parser("list")
    p.add_argument("--presets", action="store_true", help="Показать шаблоны")
    plan.set_defaults(func=cmd_plan, presets=False)

    p = sub.add_parser("woop", help="WOOP план")
    for name in ("wish", "outcome", "obstacle", "plan"):
        p.add_argument(f"--{name}")
    p.set_defaults(func=cmd_woop)

    p = sub.add_parser("vision", help="Видение")
    p.add_argument("text", nargs="?")
    p.set_defaults(func=cmd_vision)

    p = sub.add_parser("note", help="Заметка «цена бездействия»")
    p.add_argument("text")
    p.add_argument("--day", help="YYYY-MM-DD, по умолчанию сегодня")
    p.set_defaults(func=cmd_note)

    p = sub.add_parser("day", help="Сводка за день")
    p.add_argument("day", nargs="?", help="YYYY-MM-DD")
    p.set_defaults(func=cmd_day)

    p = sub.add_parser("stats", help="Статистика")
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_stats)

    sub.add_parser("badges", help="Значки").set_defaults(func=cmd_badges)
    sub.add_parser("themes", help="Темы").set_defaults(func=cmd_themes)

    p = sub.add_parser("theme", help="Выбрать тему")
    p.add_argument("color")
    p.set_defaults(func=cmd_theme)

    p = sub.add_parser("focus", help="Фокус-сессия")
    p.add_argument("--now", action="store_true", help="Засчитать сессию без ожидания")
    p.set_defaults(func=cmd_focus)

    sub.add_parser("spark", help="Случайная микро-задача").set_defaults(func=cmd_spark)

    p = sub.add_parser("reminders", help="Напоминания on/off")
    p.add_argument("state", type=_flag)
    p.set_defaults(func=cmd_reminders)

    p = sub.add_parser("shield", help="Аудио-щит on/off")
    p.add_argument("state", type=_flag)
    p.set_defaults(func=cmd_shield)

    p = sub.add_parser("export", help="Экспорт снимка")
    p.add_argument("--dir", type=Path)
    p.add_argument("--stdout", action="store_true")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("export-csv", help="Экспорт журнала в CSV")
    p.add_argument("--output", type=Path)
    p.set_defaults(func=cmd_export_csv)

    p = sub.add_parser("import", help="Импорт снимка")
    p.add_argument("path", type=Path)
    p.set_defaults(func=cmd_import)

    sub.add_parser("run", help="Фоновая работа").set_defaults(func=cmd_run)

    return parser

def _fail(message: str) -> int:
    print(f"❌ {' '.join(str(message).split())}")
    return 1

def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция"""
    args = build_parser().parse_args(argv)

    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        return _fail(e)

    setup_logger(config)

    try:
        with MomentumEngine.open(config) as engine:
            engine.check_rollover()
            args.func(engine, args)
    except MomentumError as e:
        logger.debug(f"Команда {args.command} завершилась ошибкой: {e}")
        return _fail(e)
    except (OSError, ValueError) as e:
        return _fail(e)
    return 0

if __name__ == "__main__":
    sys.exit(main())
