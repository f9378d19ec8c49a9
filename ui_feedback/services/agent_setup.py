"""
Agent Setup
===========

Registers this server in the MCP config files of known coding agents
(``init``) and checks that registration (``doctor``).

Config paths are resolved at call time so the current home directory and
working directory are used.
"""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

logger = logging.getLogger(__name__)

MCP_SERVER_KEY = "ui-feedback"

MCP_ENTRY = {
    "command": "ui-feedback-mcp",
    "args": ["server"],
}

MIN_PYTHON = (3, 10)


@dataclass(frozen=True)
class AgentConfig:
    name: str
    config_path: Path


def get_agent_configs(home: Optional[Path] = None, cwd: Optional[Path] = None) -> List[AgentConfig]:
    home = home or Path.home()
    cwd = cwd or Path.cwd()
    return [
        AgentConfig("Claude Code", home / ".claude" / "mcp.json"),
        AgentConfig("Cursor", cwd / ".cursor" / "mcp.json"),
        AgentConfig("VS Code / Copilot", cwd / ".vscode" / "mcp.json"),
        AgentConfig("Windsurf", cwd / ".codeium" / "windsurf" / "mcp_config.json"),
    ]


def _read_config(path: Path) -> dict:
    config = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(config, dict):
        raise ValueError("top-level JSON value is not an object")
    return config


def run_init(agents: Optional[List[AgentConfig]] = None, out: Optional[TextIO] = None) -> int:
    """Add the MCP server entry to every detected agent config.

    Returns the number of agents configured (newly or already).
    """
    out = out or sys.stderr
    print("ui-feedback-mcp init\n", file=out)
    agents = agents if agents is not None else get_agent_configs()
    configured = 0

    for agent in agents:
        if not agent.config_path.parent.is_dir():
            print(f"  [ ] {agent.name} — config dir not found, skipping", file=out)
            continue

        try:
            config = _read_config(agent.config_path) if agent.config_path.exists() else {}
            servers = config.get("mcpServers")
            if not isinstance(servers, dict):
                servers = {}

            if MCP_SERVER_KEY in servers:
                print(f"  [✓] {agent.name} — already configured", file=out)
                configured += 1
                continue

            servers[MCP_SERVER_KEY] = MCP_ENTRY
            config["mcpServers"] = servers
            agent.config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
            print(f"  [+] {agent.name} — configured at {agent.config_path}", file=out)
            configured += 1
        except (OSError, ValueError) as e:
            logger.warning("agent_config_failed", extra={"agent": agent.name, "error": str(e)})
            print(f"  [!] {agent.name} — error: {e}", file=out)

    print(f"\nDone. {configured} agent(s) configured.", file=out)
    if configured == 0:
        snippet = json.dumps({"mcpServers": {MCP_SERVER_KEY: MCP_ENTRY}}, indent=2)
        print(
            "No agents detected. You can manually add to your agent config:\n" + snippet,
            file=out,
        )
    return configured


def run_doctor(
    agents: Optional[List[AgentConfig]] = None,
    out: Optional[TextIO] = None,
    python_version: tuple = tuple(sys.version_info[:3]),
) -> int:
    """Verify the interpreter and agent registration. Returns the issue count."""
    out = out or sys.stderr
    print("ui-feedback-mcp doctor\n", file=out)
    issues = 0

    version = ".".join(str(p) for p in python_version)
    required = ".".join(str(p) for p in MIN_PYTHON)
    if tuple(python_version[:2]) >= MIN_PYTHON:
        print(f"  [✓] Python {version} (>={required} required)", file=out)
    else:
        print(f"  [✗] Python {version} — {required}+ required", file=out)
        issues += 1

    agents = agents if agents is not None else get_agent_configs()
    has_config = False

    for agent in agents:
        if not agent.config_path.exists():
            continue
        try:
            config = _read_config(agent.config_path)
        except (OSError, ValueError):
            print(f"  [!] {agent.name} — config file is invalid JSON", file=out)
            issues += 1
            continue

        servers = config.get("mcpServers")
        if isinstance(servers, dict) and MCP_SERVER_KEY in servers:
            print(f"  [✓] {agent.name} — configured", file=out)
            has_config = True
        else:
            print(f"  [~] {agent.name} — config exists but no MCP entry. Run 'init'.", file=out)

    if not has_config:
        print("  [✗] No agent configured. Run 'ui-feedback-mcp init'.", file=out)
        issues += 1

    if issues == 0:
        print("\nAll checks passed.", file=out)
    else:
        print(f"\n{issues} issue(s) found. Fix them and run doctor again.", file=out)
    return issues
