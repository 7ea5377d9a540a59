import logging
import os
from collections import defaultdict

import discord
from dotenv import load_dotenv

from nexus_ai import AssistantOptions, NexusAssistant
from nexus_ai.conversation import welcome_turn
from nexus_ai.prompts import INDUSTRIES, SUPPORTED_LANGUAGES
from nexus_ai.reconciler import is_linkable

# Load settings (bot token, model credentials) from a .env file.
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("discord_bot")

# Put DISCORD_BOT_TOKEN="YOUR_BOT_TOKEN" in the .env file.
TOKEN = os.getenv("DISCORD_BOT_TOKEN")

if not TOKEN:
    raise ValueError("DISCORD_BOT_TOKEN is not set. Check your .env file.")

DISCORD_MESSAGE_LIMIT = 2000
# Keep only the latest turns per channel; older ones are dropped before each call.
MAX_HISTORY_TURNS = 20

assistant = NexusAssistant(options=AssistantOptions(provider=os.getenv("NEXUS_PROVIDER", "gemini")))

# The bot is the caller, so it owns each channel's conversation history.
histories = defaultdict(lambda: (welcome_turn(),))

intents = discord.Intents.default()
intents.message_content = True  # needed to read command text

client = discord.Client(intents=intents)


def _clip(text):
    if len(text) > DISCORD_MESSAGE_LIMIT:
        return text[: DISCORD_MESSAGE_LIMIT - 3] + "..."
    return text


def render_news(keyword, articles):
    response = f"📰 {keyword} news\n\n"
    for article in articles:
        response += f"**{article.title}**\n"
        response += f"*{article.source} - {article.date}*\n"
        if article.summary:
            response += f"{article.summary}\n"
        if is_linkable(article.url):
            response += f"<{article.url}>\n\n"
        else:
            response += "(source unavailable)\n\n"
    return _clip(response)


@client.event
async def on_ready():
    logger.info("Logged in as %s", client.user)


@client.event
async def on_message(message):
    # Ignore the bot's own messages.
    if message.author == client.user:
        return

    content = message.content.strip()

    if content.startswith("!ask"):
        question = content[len("!ask"):].strip()
        if not question:
            await message.channel.send("Usage: !ask <question>")
            return
        history = histories[message.channel.id][-MAX_HISTORY_TURNS:]
        reply, histories[message.channel.id] = await assistant.converse(question, history)
        await message.channel.send(_clip(reply))

    elif content.startswith("!translate"):
        parts = content.split(maxsplit=2)
        if len(parts) < 3:
            langs = ", ".join(SUPPORTED_LANGUAGES)
            await message.channel.send(f"Usage: !translate <language> <text>  (languages: {langs})")
            return
        _, language, text = parts
        target = language.title() if language.title() in SUPPORTED_LANGUAGES else language
        translated = await assistant.translate(text, target)
        await message.channel.send(_clip(translated))

    elif content.startswith("!news"):
        keyword = content[len("!news"):].strip() or INDUSTRIES[0]
        await message.channel.send(f"Fetching the latest {keyword} news... please wait.")
        articles = await assistant.fetch_news(keyword)
        await message.channel.send(render_news(keyword, articles))


if __name__ == "__main__":
    client.run(TOKEN)
