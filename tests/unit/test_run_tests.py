import pytest

from run_tests import RESULTS_DIR, build_pytest_args

pytestmark = pytest.mark.unit


class TestBuildPytestArgs:

    def test_all(self):
        assert build_pytest_args('all') == ['-v', '--tb=short', 'tests/']

    def test_suite_with_marker(self):
        assert build_pytest_args('unit') == ['-v', '--tb=short', 'tests/unit/', '-m', 'unit']

    def test_keyword_and_allure(self):
        args = build_pytest_args('e2e', keyword='flow', allure_dir=RESULTS_DIR)
        assert args[-3:] == ['-k', 'flow', f'--alluredir={RESULTS_DIR}']
