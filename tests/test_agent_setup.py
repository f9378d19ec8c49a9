"""
Tests for agent config registration (init) and setup checks (doctor).
"""

import io
import json

from ui_feedback.services.agent_setup import (
    MCP_ENTRY,
    MCP_SERVER_KEY,
    AgentConfig,
    get_agent_configs,
    run_doctor,
    run_init,
)


def _agent(tmp_path, name="Cursor", create_dir=True):
    config_dir = tmp_path / name.lower()
    if create_dir:
        config_dir.mkdir()
    return AgentConfig(name, config_dir / "mcp.json")


class TestGetAgentConfigs:
    def test_known_agents(self, tmp_path):
        configs = get_agent_configs(home=tmp_path / "home", cwd=tmp_path / "proj")
        names = [c.name for c in configs]
        assert names == ["Claude Code", "Cursor", "VS Code / Copilot", "Windsurf"]
        assert configs[0].config_path == tmp_path / "home" / ".claude" / "mcp.json"
        assert configs[1].config_path == tmp_path / "proj" / ".cursor" / "mcp.json"


class TestRunInit:
    def test_writes_new_config(self, tmp_path):
        agent = _agent(tmp_path)
        out = io.StringIO()
        assert run_init([agent], out=out) == 1

        config = json.loads(agent.config_path.read_text())
        assert config["mcpServers"][MCP_SERVER_KEY] == MCP_ENTRY
        assert "[+] Cursor" in out.getvalue()

    def test_preserves_other_servers(self, tmp_path):
        agent = _agent(tmp_path)
        agent.config_path.write_text(json.dumps({"mcpServers": {"other": {"command": "x"}}, "theme": "dark"}))
        run_init([agent], out=io.StringIO())

        config = json.loads(agent.config_path.read_text())
        assert set(config["mcpServers"]) == {"other", MCP_SERVER_KEY}
        assert config["theme"] == "dark"

    def test_already_configured(self, tmp_path):
        agent = _agent(tmp_path)
        run_init([agent], out=io.StringIO())
        out = io.StringIO()
        assert run_init([agent], out=out) == 1
        assert "already configured" in out.getvalue()

    def test_skips_missing_dir(self, tmp_path):
        agent = _agent(tmp_path, create_dir=False)
        out = io.StringIO()
        assert run_init([agent], out=out) == 0
        assert not agent.config_path.exists()
        assert "manually add" in out.getvalue()

    def test_invalid_json_reported(self, tmp_path):
        agent = _agent(tmp_path)
        agent.config_path.write_text("{broken")
        out = io.StringIO()
        assert run_init([agent], out=out) == 0
        assert "[!] Cursor" in out.getvalue()
        assert agent.config_path.read_text() == "{broken"


class TestRunDoctor:
    def test_all_good(self, tmp_path):
        agent = _agent(tmp_path)
        run_init([agent], out=io.StringIO())
        out = io.StringIO()
        assert run_doctor([agent], out=out, python_version=(3, 12, 1)) == 0
        assert "All checks passed." in out.getvalue()

    def test_no_agent_configured(self, tmp_path):
        out = io.StringIO()
        assert run_doctor([_agent(tmp_path)], out=out, python_version=(3, 12, 1)) == 1
        assert "No agent configured" in out.getvalue()

    def test_old_python(self, tmp_path):
        agent = _agent(tmp_path)
        run_init([agent], out=io.StringIO())
        assert run_doctor([agent], out=io.StringIO(), python_version=(3, 9, 18)) == 1

    def test_entry_missing(self, tmp_path):
        agent = _agent(tmp_path)
        agent.config_path.write_text(json.dumps({"mcpServers": {}}))
        out = io.StringIO()
        assert run_doctor([agent], out=out, python_version=(3, 12, 1)) == 1
        assert "Run 'init'" in out.getvalue()

    def test_invalid_json(self, tmp_path):
        broken = _agent(tmp_path, name="Broken")
        broken.config_path.write_text("[1, 2")
        good = _agent(tmp_path, name="Good")
        run_init([good], out=io.StringIO())

        out = io.StringIO()
        assert run_doctor([broken, good], out=out, python_version=(3, 12, 1)) == 1
        assert "invalid JSON" in out.getvalue()
