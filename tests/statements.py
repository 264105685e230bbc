"""Synthetic statement text shared by the test modules."""

CHASE_TEXT = """Chase
Account number 12345678 Sort code 60-84-64
Statement 1 Jan 2024 to 31 Jan 2024
Opening balance £1,245.67
15 Jan 2024 TESCO STORES Purchase -£45.67 £1,200.00
16 Jan 2024 Card payment - PRET A MANGER Purchase -£4.50 £1,195.50
20 Jan 2024 ACME LTD SALARY Payment +£2,000.00 £3,195.50
25 Jan 2024 Refund - AMAZON.CO.UK Refund +£15.00 £3,210.50
"""

CHASE_THREE_ROWS = """Chase
Account number 12345678 Sort code 60-84-64
Statement 1 Jan 2024 to 31 Jan 2024
15 Jan 2024 TESCO STORES Purchase -£45.67 £1,200.00
16 Jan 2024 Card payment - PRET A MANGER Purchase -£4.50 £1,195.50
20 Jan 2024 ACME LTD SALARY Payment +£2,000.00 £3,195.50
"""

MONZO_TEXT = """Monzo Bank Limited
monzo.com
Personal account statement
2024-01-30 Pret A Manger -4.50 1,195.50
2024-01-31 Salary ACME +2,000.00 3,195.50
2024-02-01 Netflix −10.99 3,184.51
"""

SANTANDER_TEXT = """Santander UK plc
Sort code 09-01-28 Account number 12345678
Your account summary for 1st December 2023 to 31st January 2024
Date Description Money in Money out Balance
3rd Dec Balance brought forward 500.00
4th Dec CARD PAYMENT TO TESCO STORES 12.50 487.50
15th Dec BANK GIRO CREDIT REF ACME PAYROLL RECEIPT 1,000.00 1,487.50
2nd Jan DIRECT DEBIT PAYMENT TO BRITISH GAS 60.00 1,427.50
5th Jan FASTER PAYMENTS RECEIPT REF GIFT FROM MUM 25.00 1,452.50
"""

LLOYDS_TEXT = """Lloyds Bank
Your Account Sort Code 30-00-00 Account Number 12345678
Statement period 01 March 2024 to 31 March 2024
Date Description Type Money In (£) Money Out (£) Balance (£)
01 Mar 24 TESCO STORES 3041 DEB -45.67 1,154.33
05 Mar 24 ACME PAYROLL BGC 2,000.00 3,154.33
10 Mar 24 NETFLIX.COM DD –10.99 3,143.34
"""

# Balances run 1,000.00 -> 950.00 -> 950.00 -> 1,200.00; the middle pair sits
# in page furniture only.
BARCLAYS_TEXT = """BARCLAYS
Your business current account
Statement period 1 Jan 2024 - 31 Jan 2024
Start balance £1,000.00
Date Description Money out £ Money in £ Balance £
3 Jan Card Payment to TESCO STORES 50.00 950.00
Page 2 of 3 Sort Code 20-00-00 Account No 12345678 0.00 950.00
5 Jan Bank Giro Credit ACME PAYROLL 250.00 1,200.00
"""

GENERIC_TEXT = """Acme Credit Union
Statement period: March 2024
Transactions
02/03/2024 Card purchase CORNER SHOP -12.40
05/03/2024 Salary ACME WIDGETS 1,850.00 CR
09/03/2024 Direct debit OCTOPUS ENERGY 85.00 DR
"""
