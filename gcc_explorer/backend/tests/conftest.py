import pytest
from models import Account, Center, DashboardData, Function, Prospect, Service, Tech


@pytest.fixture
def dashboard_data() -> DashboardData:
    """Four accounts across three countries, five centers, one prospect list."""
    accounts = [
        Account(
            account_global_legal_name="Acme Technologies",
            account_hq_country="India",
            account_hq_region="APAC",
            account_hq_industry="Software",
            account_primary_category="IT",
            account_primary_nature="Captive",
            account_nasscom_status="Member",
            account_hq_revenue="$2.5M",
            account_hq_revenue_range="$1M-$5M",
            account_hq_employee_range="1000-5000",
            account_center_employees_range="501-1000",
            years_in_india=12,
            account_first_center_year=2008,
        ),
        Account(
            account_global_legal_name="Beta Foods",
            account_hq_country="India",
            account_hq_region="APAC",
            account_hq_industry="Food",
            account_primary_category="Consumer",
            account_primary_nature="Captive",
            account_nasscom_status="Non Member",
            account_hq_revenue=800000,
            account_hq_revenue_range="<$1M",
            account_hq_employee_range="100-500",
            account_center_employees_range="101-500",
            years_in_india=5,
            account_first_center_year=2015,
        ),
        Account(
            account_global_legal_name="Gamma Corp",
            account_hq_country="USA",
            account_hq_region="Americas",
            account_hq_industry="Software",
            account_primary_category="IT",
            account_primary_nature="Shared Services",
            account_nasscom_status="Member",
            account_hq_employee_range="1000-5000",
        ),
        Account(
            account_global_legal_name="Delta Bank",
            account_hq_country="Germany",
            account_hq_region="EMEA",
            account_hq_industry="Banking",
            account_primary_category="BFSI",
            account_primary_nature="Captive",
            account_nasscom_status="Member",
            account_hq_revenue="4 Mn",
            account_hq_revenue_range="$1M-$5M",
            account_hq_employee_range="5000+",
            account_center_employees_range="1000+",
            years_in_india=20,
            account_first_center_year=2003,
        ),
    ]
    centers = [
        Center(cn_unique_key="C1", account_global_legal_name="Acme Technologies", center_name="Acme Bengaluru",
               center_status="Active Center", center_type="GCC", center_focus="Engineering",
               center_city="Bengaluru", center_state="Karnataka", center_country="India",
               center_employees_range="501-1000", center_inc_year=2008),
        Center(cn_unique_key="C2", account_global_legal_name="Acme Technologies", center_name="Acme Pune",
               center_status="Upcoming", center_type="GCC", center_focus="Operations",
               center_city="Pune", center_state="Maharashtra", center_country="India",
               center_employees_range="101-500", center_inc_year=2024),
        Center(cn_unique_key="C3", account_global_legal_name="Beta Foods", center_name="Beta Chennai",
               center_status="Active Center", center_type="Shared Services", center_focus="Finance",
               center_city="Chennai", center_state="Tamil Nadu", center_country="India",
               center_employees_range="101-500"),
        Center(cn_unique_key="C4", account_global_legal_name="Gamma Corp", center_name="Gamma Hyderabad",
               center_status="Active Center", center_type="GCC", center_focus="Engineering",
               center_city="Hyderabad", center_state="Telangana", center_country="India",
               center_employees_range="1000+", center_inc_year=2012),
        Center(cn_unique_key="C5", account_global_legal_name="Delta Bank", center_name="Delta Mumbai",
               center_status="Non Operational", center_type="Captive", center_focus="Operations",
               center_city="Mumbai", center_state="Maharashtra", center_country="India",
               center_employees_range="1000+", center_inc_year=2003),
    ]
    functions = [
        Function(cn_unique_key="C1", function_name="IT"),
        Function(cn_unique_key="C1", function_name="ER&D"),
        Function(cn_unique_key="C2", function_name="IT"),
        Function(cn_unique_key="C3", function_name="F&A"),
        Function(cn_unique_key="C4", function_name="IT"),
        Function(cn_unique_key="C5", function_name="HR"),
    ]
    services = [
        Service(cn_unique_key=key, primary_service=service)
        for key, service in [("C1", "IT"), ("C2", "IT"), ("C3", "F&A"), ("C4", "IT"), ("C5", "HR")]
    ]
    tech = [
        Tech(cn_unique_key="C1", software_in_use="Salesforce CRM", software_category="CRM"),
        Tech(cn_unique_key="C1", software_in_use="SAP ERP", software_category="ERP"),
        Tech(cn_unique_key="C4", software_in_use="Workday", software_category="HR"),
        Tech(cn_unique_key="C5", software_in_use="Salesforce CRM", software_category="CRM"),
    ]
    prospects = [
        Prospect(account_global_legal_name="Acme Technologies", prospect_first_name="Asha",
                 prospect_title="VP of Engineering", prospect_department="Engineering",
                 prospect_level="VP", prospect_city="Bengaluru"),
        Prospect(account_global_legal_name="Acme Technologies", prospect_first_name="Ravi",
                 prospect_title="Director, Finance", prospect_department="Finance",
                 prospect_level="Director", prospect_city="Pune"),
        Prospect(account_global_legal_name="Beta Foods", prospect_first_name="Meera",
                 prospect_title="Chief Financial Officer", prospect_department="Finance",
                 prospect_level="C-Level", prospect_city="Chennai"),
        Prospect(account_global_legal_name="Gamma Corp", prospect_first_name="John",
                 prospect_title="Head of IT", prospect_department="IT",
                 prospect_level="Head", prospect_city="Hyderabad"),
        Prospect(account_global_legal_name="Delta Bank", prospect_first_name="Karl",
                 prospect_title="vp operations", prospect_department="Operations",
                 prospect_level="VP", prospect_city="Mumbai"),
    ]
    return DashboardData(
        accounts=accounts,
        centers=centers,
        functions=functions,
        services=services,
        tech=tech,
        prospects=prospects,
    )
