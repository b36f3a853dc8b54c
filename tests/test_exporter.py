"""
Tests for the Export Serializer
"""

from datetime import date

import pytest

from bill_recon.reconciliation.engine import ReconciliationEngine
from bill_recon.reconciliation.errors import EmptyDatasetError
from bill_recon.reconciliation.exporter import ExportSerializer, quote, serialize_result
from bill_recon.reconciliation.models import RecordCategory


EXPECTED_EXPORT = (
    'Company,Type,Date,Company Name,Invoice #,Total,Client,Reference,Amount,Running Balance\n'
    '"acme corp","Bill","2024-02-01","acme corp","INV-003","300.50","","","","300.50"\n'
    '"Acme Corp","Bill","2024-01-15","Acme Corp","INV-001","$1,200.00","","","","1500.50"\n'
    '"Acme Corp","Credit","2024-01-20","","","","Acme Corp","PAY-1","1000","500.50"\n'
    '\n'
    '"Globex","Bill","2024-01-05","Globex","INV-002","500","","","","500.00"\n'
    '"Globex","Credit","2024-01-25","","","","Globex","PAY-2","$600.00","-100.00"\n'
    '\n\nSUMMARY\n'
    '"Total Companies","2"\n'
    '"Total Records","5"\n'
    '"Total Invoices","2000.50"\n'
    '"Total Payments","1600.00"\n'
    '"Net Outstanding","400.50"\n'
    '\n\nCOMPANY SUMMARY\n'
    '"Company Name","Total Invoices","Total Payments","Outstanding Balance"\n'
    '"Acme Corp","1500.50","1000.00","500.50"\n'
    '"Globex","500.00","600.00","-100.00"\n'
)


class TestExportSerializer:
    """Test cases for ExportSerializer"""

    def setup_method(self):
        self.serializer = ExportSerializer()
        self.engine = ReconciliationEngine()

    def test_full_document(self, bills, credits):
        result = self.engine.reconcile(bills, credits)
        assert self.serializer.serialize(result) == EXPECTED_EXPORT

    def test_name_column_replaced_by_company(self, make_record):
        result = self.engine.reconcile([make_record('Acme', 100)],
                                       [make_record('Acme', 30, RecordCategory.CREDIT)])

        lines = self.serializer.serialize(result).split('\n')

        assert lines[0] == 'Company,Type,Total,Running Balance'
        assert lines[1] == '"Acme","Bill","100","100.00"'
        assert lines[2] == '"Acme","Credit","30","70.00"'

    def test_single_company_omits_company_summary(self, make_record):
        result = self.engine.reconcile([make_record('Acme', 100)], [])
        document = self.serializer.serialize(result)

        assert 'SUMMARY' in document
        assert 'COMPANY SUMMARY' not in document
        assert document.endswith('"Net Outstanding","100.00"\n')

    def test_company_summary_sorted_by_name(self, make_record):
        result = self.engine.reconcile([make_record('zeta', 1), make_record('Beta', 2), make_record('alpha', 3)], [])
        document = self.serializer.serialize(result)

        section = document.split('COMPANY SUMMARY\n')[1].strip().split('\n')
        assert [line.split(',')[0] for line in section[1:]] == ['"alpha"', '"Beta"', '"zeta"']

    def test_company_summary_sorts_accented_names(self, make_record):
        result = self.engine.reconcile([make_record('Zeta', 1), make_record('Émile', 2), make_record('Fox', 3)], [])
        document = self.serializer.serialize(result)

        section = document.split('COMPANY SUMMARY\n')[1].strip().split('\n')
        assert [line.split(',')[0] for line in section[1:]] == ['"Émile"', '"Fox"', '"Zeta"']

    def test_names_that_collate_equal_export_as_separate_blocks(self, make_record):
        result = self.engine.reconcile([make_record('Strasse', 10), make_record('Straße', 20)],
                                       [make_record('Strasse', 5, RecordCategory.CREDIT)])
        body = self.serializer.serialize(result).split('\n\n\nSUMMARY')[0]

        assert body.split('\n') == [
            'Company,Type,Total,Running Balance',
            '"Strasse","Bill","10","10.00"',
            '"Strasse","Credit","5","5.00"',
            '',
            '"Straße","Bill","20","20.00"',
        ]

    def test_blank_line_between_companies_only(self, make_record):
        result = self.engine.reconcile([make_record('Acme', 1), make_record('Globex', 2)], [])
        body = self.serializer.serialize(result).split('\n\n\nSUMMARY')[0]

        assert body.split('\n') == [
            'Company,Type,Total,Running Balance',
            '"Acme","Bill","1","1.00"',
            '',
            '"Globex","Bill","2","2.00"',
        ]

    def test_quotes_are_doubled(self, make_record):
        result = self.engine.reconcile([make_record('Say "Hi" Ltd', 5, Memo='6" pipe')], [])
        document = self.serializer.serialize(result)

        assert '"Say ""Hi"" Ltd","Bill","5","6"" pipe","5.00"' in document

    def test_negative_balance_formatting(self, make_record):
        result = self.engine.reconcile([], [make_record('Acme', 12.5, RecordCategory.CREDIT)])
        document = self.serializer.serialize(result)

        assert '"Acme","Credit","12.5","-12.50"' in document
        assert '"Net Outstanding","-12.50"' in document

    def test_missing_values_are_empty_strings(self, make_record):
        bill = make_record('Acme', 10, Ref='R1')
        credit = make_record('Acme', 4, RecordCategory.CREDIT)
        result = self.engine.reconcile([bill], [credit])
        lines = self.serializer.serialize(result).split('\n')

        assert lines[0] == 'Company,Type,Total,Ref,Running Balance'
        assert lines[2] == '"Acme","Credit","4","","6.00"'

    def test_empty_result_raises(self, bills, credits):
        result = self.engine.reconcile(bills, credits, filter_term='nobody')
        with pytest.raises(EmptyDatasetError):
            self.serializer.serialize(result)

    def test_build_document(self, bills, credits):
        result = self.engine.reconcile(bills, credits)
        document = self.serializer.build_document(result, today=date(2024, 6, 1))

        assert document.filename == 'business_transactions_2024-06-01.csv'
        assert document.content_type == 'text/csv'
        assert document.content == EXPECTED_EXPORT
        assert document.metadata == {'records': 5, 'companies': 2}

    def test_write_to(self, bills, credits, tmp_path):
        result = self.engine.reconcile(bills, credits)
        document = self.serializer.build_document(result, today=date(2024, 6, 1))

        path = document.write_to(tmp_path / 'out')

        assert path.name == 'business_transactions_2024-06-01.csv'
        assert path.read_bytes().decode('utf-8') == EXPECTED_EXPORT

    def test_filename_prefix_from_config(self):
        serializer = ExportSerializer({'export': {'filename_prefix': 'ledger'}})
        assert serializer.filename(date(2024, 1, 2)) == 'ledger_2024-01-02.csv'
        assert serializer.config['export']['output_dir'] == 'exports'

    def test_serialize_result_convenience(self, bills, credits):
        assert serialize_result(self.engine.reconcile(bills, credits)) == EXPECTED_EXPORT

    def test_quote_helper(self):
        assert quote('a"b') == '"a""b"'
        assert quote(3) == '"3"'
