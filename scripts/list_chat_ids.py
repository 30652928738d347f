"""List Telegram chat ids that have messaged the bot.

Send any message to the bot first, then run this and copy the ids into
TELEGRAM_CHAT_IDS.
"""
from canvas_bot.config import get_settings
from canvas_bot.notify import TelegramNotifier

s = get_settings()
notifier = TelegramNotifier(settings=s)

chat_ids = notifier.get_chat_ids()
if not chat_ids:
    print("No chats found. Message the bot and try again.")
for chat_id in chat_ids:
    print(chat_id)
print(f"\nTELEGRAM_CHAT_IDS={','.join(chat_ids)}")
