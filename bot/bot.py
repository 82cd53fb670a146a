import os, logging
from dotenv import load_dotenv
from telegram import Update, KeyboardButton, ReplyKeyboardMarkup, WebAppInfo
from telegram.ext import Application, CommandHandler, ContextTypes

load_dotenv()
BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
WEBAPP_URL = os.getenv("WEBAPP_URL", "https://example.com/webapp")

logger = logging.getLogger(__name__)

def start_keyboard(webapp_url: str) -> ReplyKeyboardMarkup:
    kb = [[
        KeyboardButton(text="Open BTZ Rate", web_app=WebAppInfo(url=webapp_url))
    ]]
    return ReplyKeyboardMarkup(kb, resize_keyboard=True)

async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    user = update.effective_user
    logger.info("/start from %s", user.id if user else None)
    await update.message.reply_text(
        "Open the mini-app to send rate and coms requests.",
        reply_markup=start_keyboard(WEBAPP_URL)
    )

def build_application(token: str) -> Application:
    if not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
    app = Application.builder().token(token).build()
    app.add_handler(CommandHandler("start", start))
    return app

def main():
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    build_application(BOT_TOKEN).run_polling()

if __name__ == "__main__":
    main()
