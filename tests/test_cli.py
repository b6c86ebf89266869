"""Tests for the command line interface."""

from furnledger.cli.main import cli


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


class TestCostCenterCommands:
    """Tests for cost-center commands."""

    def test_create_and_list(self, cli_runner, temp_db):
        result = _invoke(cli_runner, temp_db, "cost-center", "create", "CC-003", "Living Room Sales")
        assert result.exit_code == 0
        assert "Created cost center 'CC-003'" in result.output

        result = _invoke(cli_runner, temp_db, "cost-center", "list")
        assert result.exit_code == 0
        assert "CC-003" in result.output
        assert "Living Room Sales" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = _invoke(cli_runner, temp_db, "cost-center", "list")

        assert result.exit_code == 0
        assert "No cost centers found" in result.output

    def test_duplicate(self, cli_runner, temp_db):
        _invoke(cli_runner, temp_db, "cost-center", "create", "CC-001", "General")
        result = _invoke(cli_runner, temp_db, "cost-center", "create", "CC-001", "General")

        assert result.exit_code == 1
        assert "already exists" in result.output.lower()

    def test_archive_by_code(self, cli_runner, temp_db):
        _invoke(cli_runner, temp_db, "cost-center", "create", "CC-001", "General")

        result = _invoke(cli_runner, temp_db, "cost-center", "archive", "CC-001")
        assert result.exit_code == 0

        result = _invoke(cli_runner, temp_db, "cost-center", "list", "--all")
        assert "(archived)" in result.output

    def test_archive_unknown(self, cli_runner, temp_db):
        result = _invoke(cli_runner, temp_db, "cost-center", "archive", "CC-404")

        assert result.exit_code == 1
        assert "not found" in result.output


class TestMasterDataCommands:
    """Tests for tag, contact and product commands."""

    def test_contact_with_tag(self, cli_runner, temp_db):
        assert _invoke(cli_runner, temp_db, "tag", "create", "VIP").exit_code == 0

        result = _invoke(cli_runner, temp_db, "contact", "create", "Sharma Interiors", "--tag", "VIP")
        assert result.exit_code == 0

        result = _invoke(cli_runner, temp_db, "contact", "list")
        assert "Sharma Interiors [VIP]" in result.output

        assert _invoke(cli_runner, temp_db, "contact", "untag", "1", "VIP").exit_code == 0
        result = _invoke(cli_runner, temp_db, "contact", "list")
        assert "[VIP]" not in result.output

    def test_unknown_tag(self, cli_runner, temp_db):
        result = _invoke(cli_runner, temp_db, "contact", "create", "Sharma Interiors", "--tag", "Gold")

        assert result.exit_code == 1
        assert "Tag 'Gold' not found" in result.output

    def test_products(self, cli_runner, temp_db):
        assert _invoke(cli_runner, temp_db, "product", "category-create", "Living Room").exit_code == 0
        result = _invoke(
            cli_runner, temp_db, "product", "create", "3-Seater Sofa", "--category", "Living Room", "--price", "45,000"
        )
        assert result.exit_code == 0

        result = _invoke(cli_runner, temp_db, "product", "list", "--category", "Living Room")
        assert "3-Seater Sofa" in result.output
        assert "45,000.00" in result.output

        result = _invoke(cli_runner, temp_db, "product", "categories")
        assert "Living Room" in result.output


class TestRuleCommands:
    """Tests for rule commands."""

    def test_create_evaluate_archive(self, cli_runner, temp_db, sample_data):
        result = _invoke(
            cli_runner,
            temp_db,
            "rule", "create", "VIP living room",
            "--tag", "VIP",
            "--category", "Living Room",
            "--cost-center", "CC-003",
        )
        assert result.exit_code == 0
        assert "Created rule 'VIP living room'" in result.output

        result = _invoke(
            cli_runner,
            temp_db,
            "rule", "evaluate",
            "--partner", str(sample_data["vip_customer"]),
            "--product", str(sample_data["sofa"]),
        )
        assert result.exit_code == 0
        assert "Cost center: CC-003" in result.output
        assert "Partner Tag, Product Category" in result.output

        result = _invoke(cli_runner, temp_db, "rule", "list")
        assert "VIP living room" in result.output
        assert "priority 2" in result.output

        assert _invoke(cli_runner, temp_db, "rule", "archive", "1").exit_code == 0
        result = _invoke(
            cli_runner,
            temp_db,
            "rule", "evaluate",
            "--partner", str(sample_data["vip_customer"]),
            "--product", str(sample_data["sofa"]),
        )
        assert "No rule matched." in result.output

    def test_rule_without_conditions(self, cli_runner, temp_db, sample_data):
        result = _invoke(cli_runner, temp_db, "rule", "create", "Catch-all", "--cost-center", "CC-001")

        assert result.exit_code == 1
        assert "at least one condition" in result.output

    def test_update(self, cli_runner, temp_db, sample_data):
        _invoke(cli_runner, temp_db, "rule", "create", "VIP", "--tag", "VIP", "--cost-center", "CC-001")

        result = _invoke(
            cli_runner, temp_db, "rule", "update", "1", "Sofas",
            "--product", str(sample_data["sofa"]), "--cost-center", "CC-003",
        )
        assert result.exit_code == 0

        result = _invoke(cli_runner, temp_db, "rule", "list")
        assert "Sofas" in result.output
        assert "CC-003" in result.output


class TestInvoiceAndPaymentFlow:
    """End-to-end flow from a draft invoice to a settled one."""

    def _setup_invoice(self, cli_runner, temp_db, sample_data):
        _invoke(
            cli_runner, temp_db,
            "rule", "create", "VIP living room",
            "--tag", "VIP", "--category", "Living Room", "--cost-center", "CC-003",
        )
        result = _invoke(
            cli_runner, temp_db,
            "document", "create", "invoice", "INV-2024-001",
            "--partner", str(sample_data["vip_customer"]),
            "--date", "2024-03-01", "--due-date", "2024-03-31",
        )
        assert result.exit_code == 0
        result = _invoke(
            cli_runner, temp_db,
            "document", "add-line", "1", str(sample_data["sofa"]), "--price", "118000",
        )
        assert result.exit_code == 0
        assert "-> CC-003" in result.output
        result = _invoke(cli_runner, temp_db, "document", "post", "1")
        assert result.exit_code == 0

    def test_pay_in_two_installments(self, cli_runner, temp_db, sample_data):
        self._setup_invoice(cli_runner, temp_db, sample_data)

        result = _invoke(
            cli_runner, temp_db, "pay", "1", "60,000", "--mode", "bank_transfer", "--date", "2024-03-15"
        )
        assert result.exit_code == 0
        assert "PAY-2403-0001" in result.output
        assert "partially paid" in result.output

        result = _invoke(cli_runner, temp_db, "pay", "1", "70000", "--date", "2024-03-16")
        assert result.exit_code == 1
        assert "exceeds balance due (58,000.00)" in result.output

        result = _invoke(cli_runner, temp_db, "pay", "1", "₹58,000", "--mode", "cheque", "--date", "2024-03-20")
        assert result.exit_code == 0
        assert "PAY-2403-0002" in result.output
        assert "Status:  paid" in result.output

        result = _invoke(cli_runner, temp_db, "balance", "1")
        assert result.exit_code == 0
        assert "118,000.00" in result.output
        assert "Status:  paid" in result.output

        result = _invoke(cli_runner, temp_db, "payment", "list", "1")
        assert result.output.count("PAY-2403-") == 2

    def test_reverse_and_reconcile(self, cli_runner, temp_db, sample_data):
        self._setup_invoice(cli_runner, temp_db, sample_data)
        _invoke(cli_runner, temp_db, "pay", "1", "118000", "--date", "2024-03-15")

        result = _invoke(cli_runner, temp_db, "payment", "reverse", "1", "--notes", "Cheque bounced")
        assert result.exit_code == 0
        assert "-118,000.00" in result.output
        assert "Status:  posted" in result.output

        result = _invoke(cli_runner, temp_db, "payment", "reverse", "1")
        assert result.exit_code == 1
        assert "already been reversed" in result.output

        result = _invoke(cli_runner, temp_db, "reconcile")
        assert result.exit_code == 0
        assert "Checked 1 documents, repaired 0" in result.output

    def test_show_document(self, cli_runner, temp_db, sample_data):
        self._setup_invoice(cli_runner, temp_db, sample_data)

        result = _invoke(cli_runner, temp_db, "document", "show", "1")

        assert result.exit_code == 0
        assert "Invoice INV-2024-001" in result.output
        assert "CC-003" in result.output
        assert "Balance:     118,000.00" in result.output

    def test_pay_draft_rejected(self, cli_runner, temp_db, sample_data):
        _invoke(
            cli_runner, temp_db,
            "document", "create", "invoice", "INV-9",
            "--partner", str(sample_data["walk_in"]), "--due-date", "in 30 days",
        )

        result = _invoke(cli_runner, temp_db, "pay", "1", "100")

        assert result.exit_code == 1
        assert "cannot receive payments" in result.output

    def test_document_list(self, cli_runner, temp_db, sample_data):
        self._setup_invoice(cli_runner, temp_db, sample_data)

        result = _invoke(cli_runner, temp_db, "document", "list", "--kind", "invoice")

        assert result.exit_code == 0
        assert "INV-2024-001" in result.output
        assert "posted" in result.output

    def test_budget_tracks_posted_invoice(self, cli_runner, temp_db, sample_data):
        self._setup_invoice(cli_runner, temp_db, sample_data)

        result = _invoke(
            cli_runner, temp_db,
            "budget", "create", "March living room",
            "--cost-center", "CC-003", "--type", "income",
            "--start", "2024-03-01", "--end", "2024-03-31", "--amount", "2,00,000",
        )
        assert result.exit_code == 0
        assert "Created draft budget 'March living room' (ID: 1)" in result.output

        result = _invoke(cli_runner, temp_db, "budget", "revise", "1", "250000")
        assert result.exit_code == 1
        assert "only confirmed budgets can be revised" in result.output

        assert _invoke(cli_runner, temp_db, "budget", "confirm", "1").exit_code == 0
        result = _invoke(cli_runner, temp_db, "budget", "show", "1")
        assert result.exit_code == 0
        assert "118,000.00" in result.output
        assert "82,000.00" in result.output
        assert "59.00%" in result.output

        result = _invoke(cli_runner, temp_db, "budget", "revise", "1", "236000", "--reason", "Festival")
        assert result.exit_code == 0
        assert "new budget ID: 2" in result.output

        result = _invoke(cli_runner, temp_db, "budget", "show", "1")
        assert "200,000.00 -> 236,000.00 (Festival)" in result.output
        result = _invoke(cli_runner, temp_db, "budget", "show", "2")
        assert "50.00%" in result.output

        result = _invoke(cli_runner, temp_db, "budget", "list", "--cost-center", "CC-003")
        assert "revised" in result.output
        assert "confirmed" in result.output


def test_invalid_setting_reported(cli_runner, temp_db, monkeypatch):
    monkeypatch.setenv("FURNLEDGER_RULE_CACHE_TTL", "soon")

    result = _invoke(cli_runner, temp_db, "cost-center", "list")

    assert result.exit_code == 1
    assert "FURNLEDGER_RULE_CACHE_TTL" in result.output
