import pytest

COMPONENT_SOURCE = """import React from 'react';

const Foo: React.FC = () => {
  return (
    <div>
      <h2>你好世界</h2>
      <Modal title="再见" />
    </div>
  );
};

export default Foo;
"""


@pytest.fixture
def component_file(tmp_path):
    path = tmp_path / "src" / "pages" / "foo" / "index.tsx"
    path.parent.mkdir(parents=True)
    path.write_text(COMPONENT_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def catalog_dir(tmp_path):
    return tmp_path / "files"
