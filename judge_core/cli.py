"""
討論CLI - Player1として発言し、AIのPlayer2と対戦する

使い方:
    debate-judge new "テーマ"     新規討論を作成
    debate-judge say "発言内容"   Player1として発言（評価 + AI応答）
    debate-judge status           現在の状態を表示
    debate-judge end              討論を終了して勝者を判定
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from llm_client import GroqClient, LLMError

from .config import AI_USER_ID, DEFAULT_THEME
from .controller import DebateController
from .detector import FallacyDetector
from .exceptions import DebateError
from .opponent import OpponentGenerator
from .store import InMemoryDebateStore, InMemoryMessageStore, InMemoryUserStatsStore
from .summary import SummaryGenerator
from .types import Debate, DebateSettings, EvaluationResult, Message

CLI_USER_ID = "cli-player"
DEFAULT_STATE_FILE = ".debate-state.json"

COLORS = {
    "green": "\033[92m",
    "red": "\033[91m",
    "yellow": "\033[93m",
    "cyan": "\033[96m",
    "reset": "\033[0m",
}


def print_colored(text: str, color: str, end: str = "\n"):
    print(f"{COLORS.get(color, '')}{text}{COLORS['reset']}", end=end)


def build_controller(api_key: Optional[str] = None) -> DebateController:
    client = GroqClient(api_key=api_key)
    return DebateController(
        debates=InMemoryDebateStore(),
        messages=InMemoryMessageStore(),
        user_stats=InMemoryUserStatsStore(),
        detector=FallacyDetector(client),
        summarizer=SummaryGenerator(client),
        opponent=OpponentGenerator(client),
    )


def load_state(controller: DebateController, path: Path) -> Optional[str]:
    """Restore a saved debate into the controller's stores, returning its id"""
    if not path.exists():
        return None
    state = json.loads(path.read_text(encoding="utf-8"))
    debate = controller.debates.create(Debate.from_dict(state["debate"]))
    controller.messages.load(Message.from_dict(m) for m in state["messages"])
    return debate.debate_id


def save_state(controller: DebateController, debate_id: str, path: Path) -> None:
    state = {
        "debate": controller.get_debate(debate_id).to_dict(),
        "messages": [m.to_dict() for m in controller.messages.list_for_debate(debate_id)],
    }
    path.write_text(json.dumps(state, ensure_ascii=False, indent=2), encoding="utf-8")


def _ledger_line(result: EvaluationResult) -> None:
    if result.p1_fallacies:
        print(f"  P1詭弁: {', '.join(f'M{f.utterance_index}:{f.kind}' for f in result.p1_fallacies)}")
    if result.p2_fallacies:
        print(f"  P2詭弁: {', '.join(f'M{f.utterance_index}:{f.kind}' for f in result.p2_fallacies)}")


def print_evaluation(label: str, result: EvaluationResult) -> None:
    color = "green" if result.utterance.speaker == "player1" else "red"
    print_colored(f"\n[{label}] {result.utterance.text}", color)
    print(f"  評価: P1={result.player1_score} P2={result.player2_score} | {result.latest_feedback}")
    _ledger_line(result)
    print(f"  P1加点: {json.dumps(result.p1_merits, ensure_ascii=False)}")
    print(f"  P2加点: {json.dumps(result.p2_merits, ensure_ascii=False)}")


def print_winner(debate: Debate) -> None:
    if debate.winner_id is None:
        print_colored("結果: 引き分け", "cyan")
    elif debate.winner_id == CLI_USER_ID:
        print_colored("結果: Player1の勝ち", "cyan")
    else:
        print_colored("結果: Player2(AI)の勝ち", "cyan")
    if debate.final_summary:
        print(f"  P1総評: {debate.final_summary.player1_reason}")
        print(f"  P2総評: {debate.final_summary.player2_reason}")


def cmd_new(controller: DebateController, args) -> int:
    settings = DebateSettings(max_utterances=args.max_utterances, automated_opponent=True)
    debate = controller.create_debate(args.text or DEFAULT_THEME, CLI_USER_ID, settings)
    save_state(controller, debate.debate_id, args.state)
    print(f"新規討論: \"{debate.theme}\"")
    print('次のコマンド: debate-judge say "発言内容"')
    return 0


def cmd_say(controller: DebateController, debate_id: str, args) -> int:
    if not args.text:
        print("発言内容を指定してください")
        return 1
    result = controller.submit_utterance(debate_id, CLI_USER_ID, args.text)
    print_evaluation("P1", result)
    if result.opponent_turn:
        print_evaluation("P2(AI)", result.opponent_turn)
        result = result.opponent_turn

    save_state(controller, debate_id, args.state)
    print(f"\n--- 現在のスコア: P1={result.player1_score} P2={result.player2_score} ---")
    if result.finished:
        print_winner(controller.get_debate(debate_id))
    return 0


def cmd_status(controller: DebateController, debate_id: str) -> int:
    debate = controller.get_debate(debate_id)
    messages = controller.messages.list_for_debate(debate_id)
    print(f"テーマ: {debate.theme}")
    print(f"状態: {debate.status}")
    print(f"メッセージ数: {len(messages)}")
    for i, m in enumerate(messages, start=1):
        who = "P2(AI)" if m.user_id == AI_USER_ID else "P1"
        preview = m.content[:80] + ("..." if len(m.content) > 80 else "")
        print(f"  M{i} [{who}] {preview}")
    print(f"スコア: P1={debate.player1_score} P2={debate.player2_score}")
    print(f"累積P1詭弁: {', '.join(f'M{f.utterance_index}:{f.kind}' for f in debate.p1_fallacies) or 'なし'}")
    print(f"累積P2詭弁: {', '.join(f'M{f.utterance_index}:{f.kind}' for f in debate.p2_fallacies) or 'なし'}")
    if debate.status == "finished":
        print_winner(debate)
    return 0


def cmd_end(controller: DebateController, debate_id: str, args) -> int:
    controller.end_debate(debate_id, reason="manual")
    save_state(controller, debate_id, args.state)
    print_winner(controller.get_debate(debate_id))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(prog="debate-judge", description="AI審判つき討論CLI")
    parser.add_argument("command", choices=["new", "say", "status", "end"])
    parser.add_argument("text", nargs="*", help="テーマまたは発言内容")
    parser.add_argument("--state", type=Path, default=Path(DEFAULT_STATE_FILE))
    parser.add_argument("--max-utterances", type=int, default=5)
    args = parser.parse_args(argv)
    args.text = " ".join(args.text)

    try:
        controller = build_controller()
        if args.command == "new":
            return cmd_new(controller, args)

        debate_id = load_state(controller, args.state)
        if debate_id is None:
            print("先に new で討論を作成してください")
            return 1
        if args.command == "say":
            return cmd_say(controller, debate_id, args)
        if args.command == "status":
            return cmd_status(controller, debate_id)
        return cmd_end(controller, debate_id, args)

    except (DebateError, LLMError) as e:
        print_colored(f"\n⚠️ {e}", "yellow")
        return 1


if __name__ == "__main__":
    sys.exit(main())
