"""Reply templates.  All texts are HTML; dynamic values go through ``esc``."""
from __future__ import annotations

from html import escape
from typing import Iterable, Optional, Sequence

from models import GameResponse, GameStatus, PlayerInfo, WaitingGame


LEGAL_MOVES_LIMIT = 20


def esc(value: object) -> str:
    return escape("" if value is None else str(value), quote=False)


COMMANDS_LIST = (
    "/newgame - Создать новую игру\n"
    "/listgames - Список игр, ожидающих игроков\n"
    "/joingame [ID] - Присоединиться к игре\n"
    "/move [ход] - Сделать ход\n"
    "/board - Показать доску\n"
    "/moves - Показать возможные ходы\n"
    "/status - Статус сервера\n"
    "/help - Помощь"
)


def start_text(user_name: str) -> str:
    return (
        f"♟️ <b>Привет, {esc(user_name)}! Я шахматный бот.</b>\n\n"
        "Я помогу тебе играть в шахматы с друзьями!\n\n"
        "🎮 <b>Основные команды:</b>\n"
        f"{COMMANDS_LIST}\n\n"
        "🚀 <b>Начни игру:</b> /newgame"
    )


HELP_TEXT = (
    "📚 <b>Помощь по шахматному боту</b>\n\n"
    "🆕 <b>Создание и поиск игр:</b>\n"
    "• <code>/newgame</code> - Создать новую игру\n"
    "• <code>/listgames</code> - Список игр, ожидающих игроков\n"
    "• <code>/joingame [ID]</code> - Присоединиться к игре\n\n"
    "♟️ <b>Игровой процесс:</b>\n"
    "• <code>/move [ход]</code> - Сделать ход (e2-e4)\n"
    "• <code>/board</code> - Показать текущую доску\n"
    "• <code>/moves</code> - Показать возможные ходы\n\n"
    "🤝 <b>Завершение игры:</b>\n"
    "• <code>/draw</code> - Предложить ничью\n"
    "• <code>/draw accept</code> - Принять ничью\n"
    "• <code>/draw decline</code> - Отклонить ничью\n"
    "• <code>/resign</code> - Сдаться\n\n"
    "⚙️ <b>Системные команды:</b>\n"
    "• <code>/status</code> - Статус сервера\n\n"
    "📖 <b>Пример игры:</b>\n"
    "1. Игрок 1: <code>/newgame</code>\n"
    "2. Игрок 2: <code>/joingame ABC123</code>\n"
    "3. Игрок 1: <code>/move e2-e4</code>\n"
    "4. Игрок 2: <code>/move e7-e5</code>"
)


def active_game_conflict(game_id: str) -> str:
    return (
        "⚠️ <b>У вас уже есть активная игра!</b>\n\n"
        f"🆔 Текущая игра: <code>{esc(game_id)}</code>\n\n"
        "Нельзя играть в две игры одновременно. Сначала завершите текущую."
    )


NO_ACTIVE_GAME = (
    "❌ <b>У вас нет активной игры!</b>\n\n"
    "Чтобы начать игру:\n"
    "1. Создайте новую: <code>/newgame</code>\n"
    "2. Или присоединитесь: <code>/joingame [ID]</code>"
)

MISSING_GAME_ID = (
    "❌ <b>Не указан ID игры!</b>\n\n"
    "Использование: <code>/joingame [ID]</code>\n"
    "Пример: <code>/joingame ABC123</code>\n\n"
    "Посмотреть доступные игры: <code>/listgames</code>"
)

MISSING_MOVE = (
    "❌ <b>Не указан ход!</b>\n\n"
    "Использование: <code>/move [ход]</code>\n"
    "Примеры:\n"
    "• <code>/move e2-e4</code>\n"
    "• <code>/move g1-f3</code>\n"
    "• <code>/move e1-g1</code> (рокировка)"
)

BAD_DRAW_ACTION = (
    "❌ <b>Некорректное действие!</b>\n\n"
    "Используйте:\n"
    "• <code>/draw</code> - предложить ничью\n"
    "• <code>/draw accept</code> - принять\n"
    "• <code>/draw decline</code> - отклонить"
)


def collaborator_error(title: str, message: Optional[str]) -> str:
    text = f"❌ <b>{esc(title)}</b>"
    if message:
        text += f"\n\n{esc(message)}"
    return text


def game_created(game_id: str, user_name: str, status: Optional[str]) -> str:
    return (
        "🎉 <b>Игра создана!</b>\n\n"
        f"🆔 <b>ID игры:</b> <code>{esc(game_id)}</code>\n"
        f"🎮 <b>Создатель:</b> {esc(user_name)}\n"
        f"📊 <b>Статус:</b> {esc(status)}\n\n"
        "📋 <b>Что делать дальше:</b>\n"
        f"1. Отправьте этот ID другу: <code>{esc(game_id)}</code>\n"
        f"2. Друг отправляет: <code>/joingame {esc(game_id)}</code>\n"
        "3. Вы начинаете игру первым!\n\n"
        "⏳ <b>Игра ждет второго игрока...</b>"
    )


NO_WAITING_GAMES = (
    "🤷 <b>Нет игр, ожидающих игроков</b>\n\n"
    "Хотите сыграть? Создайте новую игру:\n"
    "<code>/newgame</code>"
)


def waiting_games(games: Iterable[WaitingGame]) -> str:
    blocks = ["📋 <b>Игры, ожидающие игроков:</b>"]
    for game in games:
        blocks.append(
            f"🎮 <b>Игра ID:</b> <code>{esc(game.game_id)}</code>\n"
            f"   👤 <b>Создатель:</b> {esc(game.white_player_name)}\n"
            f"   🕐 <b>Создана:</b> {esc(game.created_at)}\n"
            f"   🎯 <b>Присоединиться:</b> <code>/joingame {esc(game.game_id)}</code>"
        )
    blocks.append("🎯 <b>Выберите игру и присоединяйтесь!</b>")
    return "\n\n".join(blocks)


def turn_message(status: object) -> str:
    game_status = GameStatus.parse(status)
    if game_status is GameStatus.CHECKMATE:
        return "🎉 <b>Игра окончена! МАТ!</b>"
    if game_status is GameStatus.STALEMATE:
        return "🤝 <b>Пат! Ничья.</b>"
    if game_status is GameStatus.DRAW:
        return "🤝 <b>Ничья!</b>"
    if game_status is GameStatus.CHECK:
        return "⚠️ <b>ШАХ!</b> Сделайте ход, чтобы уйти от шаха."
    return "🎮 <b>Игра началась!</b> Сделайте ход."


def joined_game(game_id: str, color: str, response: GameResponse) -> str:
    board = response.board if response.board is not None else "Доска не доступна"
    return (
        "✅ <b>Вы успешно присоединились к игре!</b>\n\n"
        f"🆔 <b>ID игры:</b> <code>{esc(game_id)}</code>\n"
        f"♟️ <b>Ваш цвет:</b> {esc(color)}\n"
        f"📊 <b>Статус:</b> {esc(response.status)}\n\n"
        "🎮 <b>Текущая доска:</b>\n"
        f"<pre>{esc(board)}</pre>\n\n"
        f"{turn_message(response.status)}\n\n"
        "🎯 <b>Сделать ход:</b> <code>/move [ход]</code>\n"
        "Пример: <code>/move e2-e4</code>"
    )


def _player_line(icon: str, title: str, player: Optional[PlayerInfo]) -> Optional[str]:
    if player is None:
        return None
    line = f"{icon} <b>{title}:</b> {esc(player.name)}"
    if player.rating is not None:
        line += f" (Рейтинг: {player.rating})"
    return line


def players_block(response: GameResponse) -> str:
    lines = [
        line
        for line in (
            _player_line("⚪", "Белые", response.white_player),
            _player_line("⚫", "Черные", response.black_player),
        )
        if line
    ]
    return "\n".join(lines)


def move_result(notation: str, response: GameResponse, board_text: str) -> str:
    parts = [f"✅ <b>Ход выполнен:</b> <code>{esc(notation)}</code>"]
    if response.message:
        parts.append(f"💬 <b>{esc(response.message)}</b>")
    parts.append(
        f"📊 <b>Статус:</b> {esc(response.status)}\n"
        f"♟️ <b>Очередь:</b> {esc(response.current_turn)}\n"
        f"{turn_message(response.status)}"
    )
    parts.append(f"🎮 <b>Текущая доска:</b>\n{board_text}")
    players = players_block(response)
    if players:
        parts.append(players)
    parts.append("🔄 <b>Обновить доску:</b> <code>/board</code>")
    return "\n\n".join(parts)


def board_state(response: GameResponse, board_text: str) -> str:
    parts = ["♟️ <b>Текущее состояние игры</b>"]
    if response.message:
        parts.append(f"💬 {esc(response.message)}")
    parts.append(
        f"🆔 <b>ID:</b> <code>{esc(response.game_id)}</code>\n"
        f"📊 <b>Статус:</b> {esc(response.status)}\n"
        f"🎮 <b>Очередь:</b> {esc(response.current_turn)}"
    )
    parts.append(board_text)
    players = players_block(response)
    if players:
        parts.append(f"👥 <b>Игроки:</b>\n{players}")
    parts.append(turn_message(response.status))
    parts.append("🎯 <b>Кликните на фигуру, чтобы выбрать ее для хода!</b>")
    return "\n\n".join(parts)


NO_LEGAL_MOVES = (
    "🤷 <b>Нет доступных ходов</b>\n\n"
    "Возможно:\n"
    "1. Не ваша очередь ходить\n"
    "2. Игра завершена\n"
    "3. Ошибка получения данных\n\n"
    "Проверьте статус: <code>/board</code>"
)


def legal_moves(moves: Sequence[str], limit: int = LEGAL_MOVES_LIMIT) -> str:
    lines = ["📋 <b>Возможные ходы:</b>", ""]
    lines.extend(f"• <code>{esc(move)}</code>" for move in moves[:limit])
    if len(moves) > limit:
        lines.append("")
        lines.append(f"+{len(moves) - limit} more")
    lines.append("")
    lines.append("🎯 <b>Использование:</b> <code>/move [ход]</code>")
    return "\n".join(lines)


def square_moves(square: str, moves: Sequence[str]) -> str:
    if not moves:
        return f"🤷 <b>С клетки {esc(square.upper())} нет доступных ходов</b>"
    return (
        f"🎯 <b>Выбрана фигура на клетке {esc(square.upper())}</b>\n\n"
        "Выберите целевую клетку или используйте команду:\n"
        f"<code>/move {esc(square)}-[целевая клетка]</code>"
    )


def status_text(api_status: str, sessions: int) -> str:
    return (
        "📊 <b>Статус системы</b>\n\n"
        f"{api_status}\n\n"
        "🤖 <b>Статистика бота:</b>\n"
        f"• Активных сессий: {sessions}\n\n"
        "⚙️ <b>Команды:</b>\n"
        "/newgame - Создать игру\n"
        "/listgames - Список игр\n"
        "/help - Помощь"
    )


def api_online(detail: str) -> str:
    return f"✅ API работает: {esc(detail)}"


def api_offline(detail: str) -> str:
    return f"❌ API недоступен: {esc(detail)}"


RESIGN_NOT_IMPLEMENTED = (
    "⚠️ <b>Сдача пока не реализована</b>\n\n"
    "Чтобы завершить игру:\n"
    "1. Дождитесь конца партии\n"
    "2. Или договоритесь о ничье с соперником\n\n"
    "Продолжить игру: <code>/board</code>"
)


def draw_offered(response: GameResponse) -> str:
    return (
        "🤝 <b>Ничья предложена!</b>\n\n"
        "Ожидайте ответа от соперника.\n\n"
        f"📊 Статус: {esc(response.status)}\n"
        f"💬 Сообщение: {esc(response.message)}\n\n"
        "Соперник может:\n"
        "• Принять: <code>/draw accept</code>\n"
        "• Отклонить: <code>/draw decline</code>"
    )


def draw_offer_received(game_id: str, offered_by: str) -> str:
    return (
        "🤝 <b>Соперник предлагает ничью!</b>\n\n"
        f"👤 <b>Игрок:</b> {esc(offered_by)}\n"
        f"🆔 <b>ID игры:</b> <code>{esc(game_id)}</code>\n\n"
        "Принять: <code>/draw accept</code>\n"
        "Отклонить: <code>/draw decline</code>"
    )


def draw_accepted(response: GameResponse) -> str:
    return (
        "🤝 <b>Ничья принята!</b>\n\n"
        "🎉 Игра завершена вничью!\n\n"
        f"📊 Статус: {esc(response.status)}\n"
        f"💬 Сообщение: {esc(response.message)}\n\n"
        "🎮 Начать новую игру: <code>/newgame</code>"
    )


def draw_declined(response: GameResponse) -> str:
    return (
        "❌ <b>Ничья отклонена!</b>\n\n"
        "Игра продолжается.\n\n"
        f"💬 Сообщение: {esc(response.message)}\n\n"
        "🎯 Продолжить игру: <code>/board</code>"
    )


def unknown_command(text: str) -> str:
    return (
        f"🤔 <b>Неизвестная команда:</b> <code>{esc(text)}</code>\n\n"
        "📋 <b>Доступные команды:</b>\n"
        "/start - Начало работы\n"
        f"{COMMANDS_LIST}\n\n"
        "📖 <b>Пример:</b> <code>/newgame</code>"
    )


GENERIC_APOLOGY = (
    "❌ <b>Произошла ошибка</b>\n\n"
    "Пожалуйста, попробуйте еще раз."
)


def opponent_moved(response: GameResponse, notation: str, mover: str, board_text: str) -> str:
    return (
        "♟️ <b>Соперник сделал ход!</b>\n\n"
        f"👤 <b>Игрок:</b> {esc(mover)}\n"
        f"🎮 <b>Игра:</b> <code>{esc(response.game_id)}</code>\n"
        f"📝 <b>Ход:</b> <code>{esc(notation)}</code>\n\n"
        f"{turn_message(response.status)}\n\n"
        f"{board_text}\n\n"
        "🔍 <b>Посмотреть доску:</b> <code>/board</code>\n"
        "📋 <b>Возможные ходы:</b> <code>/moves</code>"
    )


def opponent_joined(game_id: str, opponent_name: str) -> str:
    return (
        "🎮 <b>Соперник присоединился!</b>\n\n"
        f"👤 <b>Соперник:</b> {esc(opponent_name)}\n"
        f"🆔 <b>ID игры:</b> <code>{esc(game_id)}</code>\n\n"
        "🎯 Сделайте первый ход: <code>/move [ход]</code>"
    )
