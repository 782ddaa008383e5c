"""
Channel bot dispatch.

Decides which channel lines are commands and which are training material, and
when the bot should speak: on command, when addressed by name, or by chance.
"""
from __future__ import annotations

import logging
import random
import re
from typing import Iterable, List, Optional, Set

from chatter.services.chatter import ChainService
from chatter.services.errors import EmptyModel

logger = logging.getLogger(__name__)

USAGE = "Usage: {command} [say [seed...] | status | ignore | listen]"


class ChannelBot:
    """
    Routes channel messages into a ChainService.

    Returns the reply text for each handled line, or None when the bot stays
    silent. Sending the reply is the chat adapter's job.
    """

    def __init__(
        self,
        chain: ChainService,
        nick: str = "markov",
        command: str = "!markov",
        reply_chance: float = 0.01,
        ignore: Optional[Iterable[str]] = None,
        fallback_reply: str = "",
        rng: Optional[random.Random] = None,
    ):
        self.chain = chain
        self.nick = nick
        self.command = command
        self.reply_chance = reply_chance
        self.static_ignore: Set[str] = set(ignore or [])
        self.ignored: Set[str] = set()
        self.fallback_reply = fallback_reply
        self.rng = rng or random.Random()
        self._addressed = re.compile(rf"^{re.escape(nick)}\s*[:,]\s*(.*)$", re.IGNORECASE)

    @classmethod
    def from_settings(cls, chain: ChainService, settings) -> "ChannelBot":
        return cls(
            chain,
            nick=settings.BOT_NICK,
            command=settings.BOT_COMMAND,
            reply_chance=settings.REPLY_CHANCE,
            ignore=settings.BOT_IGNORE,
            fallback_reply=settings.FALLBACK_REPLY,
        )

    def is_ignored(self, sender: str) -> bool:
        return sender in self.static_ignore or sender in self.ignored

    def ignored_senders(self) -> List[str]:
        return sorted(self.static_ignore | self.ignored)

    def handle(self, sender: str, channel: str, text: str) -> Optional[str]:
        """Handle one channel line and return the reply, if any."""
        if sender == self.nick:
            return None

        parts = text.split()
        if parts and parts[0] == self.command:
            return self.handle_command(sender, channel, parts[1:])

        if self.is_ignored(sender):
            return None

        match = self._addressed.match(text.strip())
        line = match.group(1) if match else text
        self.chain.train(line)

        if match:
            return self._speak(sender, line)
        if self.rng.random() < self.reply_chance:
            logger.debug(f"[Bot] Random reply to {sender} in {channel}")
            return self._speak(sender)
        return None

    def handle_command(self, sender: str, channel: str, args: List[str]) -> Optional[str]:
        sub = args[0] if args else "say"
        logger.info(f"[Bot] {sender} in {channel}: {self.command} {sub}")

        if sub == "say":
            return self._speak(sender, " ".join(args[1:]) or None)

        if sub == "status":
            s = self.chain.stats()
            return (
                f"{sender}: order {s.order}, {s.contexts} contexts, "
                f"{s.transitions} transitions, {s.observations} observations, "
                f"{s.vocabulary} words"
            )

        if sub == "ignore":
            if sender not in self.ignored:
                self.ignored.add(sender)
                logger.info(f"[Bot] Ignoring {sender}")
            return f"{sender}: You are now being ignored. Use {self.command} listen to undo this command."

        if sub == "listen":
            if sender in self.static_ignore:
                return f"{sender}: You are on the configured ignore list."
            if sender in self.ignored:
                self.ignored.discard(sender)
                logger.info(f"[Bot] Listening to {sender}")
            return f"{sender}: {self.nick} is now listening to what you say. Use {self.command} ignore to undo this command."

        return USAGE.format(command=self.command)

    def _speak(self, sender: str, seed: Optional[str] = None) -> Optional[str]:
        try:
            text = self.chain.respond(seed)
        except EmptyModel:
            text = self.fallback_reply
        if not text:
            return None
        return f"{sender}: {text}"
