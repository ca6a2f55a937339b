"""Reply decision engine."""

from awaybot.engine.context import EngineContext
from awaybot.engine.loop import ReplyLoop
from awaybot.engine.pipeline import Decision, DecisionPipeline, Outcome

__all__ = ["Decision", "DecisionPipeline", "EngineContext", "Outcome", "ReplyLoop"]
