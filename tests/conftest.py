from pathlib import Path
from typing import Callable
from xml.etree import ElementTree as et

import pytest

POLICY_NAMESPACE = "http://schemas.microsoft.com/GroupPolicy/2006/07/PolicyDefinitions"

SAMPLE_ADMX = f"""<?xml version="1.0" encoding="utf-8"?>
<policyDefinitions xmlns="{POLICY_NAMESPACE}" revision="1.0" schemaVersion="1.0">
  <policyNamespaces>
    <target prefix="App" namespace="Contoso.Policies.App" />
    <using prefix="windows" namespace="Microsoft.Policies.Windows" />
  </policyNamespaces>
  <categories>
    <category name="Cat1" displayName="$(string.Cat1)" />
    <category name="Cat2" displayName="$(string.Cat2)">
      <parentCategory ref="Cat1" />
    </category>
    <category name="Cat3" displayName="$(string.Cat3)">
      <parentCategory ref="Cat2" />
    </category>
    <category name="External" displayName="$(string.External)">
      <parentCategory ref="windows:WindowsComponents" />
    </category>
  </categories>
  <policies>
    <policy name="PolicyA" class="Machine" displayName="$(string.PolicyA)" explainText="$(string.PolicyA_Help)" key="Software\\Policies\\App">
      <parentCategory ref="Cat2" />
    </policy>
    <policy name="PolicyBoth" class="Both" displayName="$(string.PolicyBoth)" explainText="$(string.PolicyBoth_Help)" key="Software\\Policies\\App">
      <parentCategory ref="Cat1" />
      <elements>
        <enum id="Mode" valueName="Mode">
          <item displayName="$(string.Off)"><value><decimal value="0" /></value></item>
          <item displayName="$(string.On)"><value><decimal value="01" /></value></item>
          <item displayName="$(string.Auto)"><value><decimal value="2" /></value></item>
        </enum>
      </elements>
    </policy>
    <policy name="PolicyUser" class="User" displayName="$(string.PolicyUser)" key="Software\\Policies\\App">
      <parentCategory ref="Cat3" />
      <elements>
        <enum id="Channel" valueName="Channel">
          <item displayName="$(string.Stable)"><value><string>stable</string></value></item>
          <item displayName="$(string.Beta)"><value><string>beta</string></value></item>
        </enum>
      </elements>
    </policy>
    <policy name="PolicyOrphan" class="Machine" displayName="$(string.PolicyOrphan)" key="Software\\Policies\\App">
      <parentCategory ref="Missing" />
    </policy>
    <policy name="PolicyOdd" class="Nobody" displayName="$(string.PolicyOdd)" key="Software\\Policies\\App">
      <parentCategory ref="Cat1" />
    </policy>
  </policies>
</policyDefinitions>
"""

SAMPLE_ADML = f"""<?xml version="1.0" encoding="utf-8"?>
<policyDefinitionResources xmlns="{POLICY_NAMESPACE}" revision="1.0" schemaVersion="1.0">
  <displayName />
  <description />
  <resources>
    <stringTable>
      <string id="PolicyA_Help">Enable, with caveats</string>
      <string id="PolicyBoth_Help">Controls the mode.</string>
    </stringTable>
  </resources>
</policyDefinitionResources>
"""


def _write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    return _write_file


@pytest.fixture
def admx_root() -> et.Element:
    return et.fromstring(SAMPLE_ADMX.encode("utf-8"))


@pytest.fixture
def adml_root() -> et.Element:
    return et.fromstring(SAMPLE_ADML.encode("utf-8"))


@pytest.fixture
def definitions(tmp_path: Path) -> Path:
    """An ADMX file with its ADML under an ``en-US`` folder."""
    admx_path = _write_file(tmp_path / "App.admx", SAMPLE_ADMX)
    _write_file(tmp_path / "en-US" / "App.adml", SAMPLE_ADML)
    return admx_path
