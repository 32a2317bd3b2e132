"""
handlers/start_handler.py
--------------------------
Handles /start and /help commands.
"""

from models.command import CommandDescriptor, RequestContext
from utils.logger import get_logger

logger = get_logger(__name__)

WELCOME_TEXT = (
    "Hello {name}! 👋\n"
    "I watch your servers and report their CPU, memory, disk, network and temperature.\n\n"
    "Add a server with /add <server_key>, then ask for /all to see its metrics.\n"
    "Send /help to list every command."
)


class StartHandlers:
    """
    Greeting and help.

    Args:
        router: The command router; /help lists what is registered there.
    """

    def __init__(self, router):
        self.router = router

    def commands(self) -> list[CommandDescriptor]:
        return [
            CommandDescriptor("start", "🚀 Start the bot", self.start_command),
            CommandDescriptor("help", "📖 Show help", self.help_command),
        ]

    async def start_command(self, ctx: RequestContext) -> None:
        """Handle /start command - show welcome message."""
        logger.info(f"User {ctx.user.telegram_id} ({ctx.user.display_name}) started the bot.")
        await ctx.reply(WELCOME_TEXT.format(name=ctx.user.first_name or ctx.user.display_name))

    async def help_command(self, ctx: RequestContext) -> None:
        """Handle /help command - list commands the caller may use."""
        lines = ["🤖 Available commands:", ""]
        admin_lines = []
        for descriptor in self.router.descriptors():
            line = f"/{descriptor.name} - {descriptor.description}"
            if descriptor.admin_only:
                if ctx.user.is_admin:
                    admin_lines.append(line)
            elif not descriptor.hidden:
                lines.append(line)
        if admin_lines:
            lines += ["", "🔧 Admin:"] + admin_lines
        await ctx.reply("\n".join(lines))
