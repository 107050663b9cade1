"""Baseline kiosk schema.

Stores created before version tracking already carry this structure and
report version 1, so the runner never selects this step for them. It
only runs when a store recorded at version 0 is brought forward.
"""

from typing import TYPE_CHECKING

from boothdb.storage import seed

if TYPE_CHECKING:
    from boothdb.ports.db_session import DbSessionPort

VERSION = 1
DESCRIPTION = "Baseline kiosk schema"

SCHEMA = """
-- ============================================================================
-- USERS
-- ============================================================================
CREATE TABLE IF NOT EXISTS AdminUsers (
    UserId TEXT PRIMARY KEY,
    Username TEXT NOT NULL UNIQUE,
    DisplayName TEXT NOT NULL DEFAULT '',
    PasswordHash TEXT NOT NULL,
    AccessLevel TEXT NOT NULL CHECK (AccessLevel IN ('Master', 'User')),
    IsActive BOOLEAN NOT NULL DEFAULT 1,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    LastLoginAt DATETIME,
    UpdatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CreatedBy TEXT,
    UpdatedBy TEXT,
    FOREIGN KEY (CreatedBy) REFERENCES AdminUsers(UserId),
    FOREIGN KEY (UpdatedBy) REFERENCES AdminUsers(UserId)
);

-- ============================================================================
-- PRODUCTS
-- ============================================================================
CREATE TABLE IF NOT EXISTS ProductCategories (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT NOT NULL UNIQUE,
    Description TEXT,
    IsActive BOOLEAN NOT NULL DEFAULT 1,
    SortOrder INTEGER NOT NULL DEFAULT 0,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS Products (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    CategoryId INTEGER NOT NULL,
    Name TEXT NOT NULL,
    Description TEXT,
    Price DECIMAL(10,2) NOT NULL,
    IsActive BOOLEAN NOT NULL DEFAULT 1,
    SortOrder INTEGER NOT NULL DEFAULT 0,
    PhotoCount INTEGER DEFAULT 1,
    MaxCopies INTEGER DEFAULT 10,
    ProductType TEXT NOT NULL DEFAULT 'PhotoStrips'
        CHECK (ProductType IN ('PhotoStrips', 'Photo4x6', 'SmartphonePrint')),
    StripsExtraCopyPrice DECIMAL(10,2),
    StripsMultipleCopyDiscount DECIMAL(5,2) DEFAULT 0.00,
    Photo4x6ExtraCopyPrice DECIMAL(10,2),
    Photo4x6MultipleCopyDiscount DECIMAL(5,2) DEFAULT 0.00,
    SmartphoneExtraCopyPrice DECIMAL(10,2),
    SmartphoneMultipleCopyDiscount DECIMAL(5,2) DEFAULT 0.00,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UpdatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (CategoryId) REFERENCES ProductCategories(Id),
    UNIQUE (ProductType)
);

-- ============================================================================
-- TEMPLATES
-- ============================================================================
CREATE TABLE IF NOT EXISTS TemplateCategories (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT NOT NULL UNIQUE,
    Description TEXT,
    IsActive BOOLEAN NOT NULL DEFAULT 1,
    IsPremium BOOLEAN NOT NULL DEFAULT 0,
    SortOrder INTEGER NOT NULL DEFAULT 0,
    IsSeasonalCategory BOOLEAN NOT NULL DEFAULT 0,
    SeasonStartDate TEXT CHECK (SeasonStartDate IS NULL OR SeasonStartDate GLOB '[0-1][0-9]-[0-3][0-9]'),
    SeasonEndDate TEXT CHECK (SeasonEndDate IS NULL OR SeasonEndDate GLOB '[0-1][0-9]-[0-3][0-9]'),
    SeasonalPriority INTEGER NOT NULL DEFAULT 0,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS TemplateLayouts (
    Id TEXT PRIMARY KEY,
    LayoutKey TEXT NOT NULL UNIQUE,
    Name TEXT NOT NULL,
    Description TEXT,
    Width INTEGER NOT NULL,
    Height INTEGER NOT NULL,
    PhotoCount INTEGER NOT NULL,
    ProductCategoryId INTEGER NOT NULL,
    IsActive BOOLEAN NOT NULL DEFAULT 1,
    SortOrder INTEGER NOT NULL DEFAULT 0,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (ProductCategoryId) REFERENCES ProductCategories(Id)
);

CREATE TABLE IF NOT EXISTS TemplatePhotoAreas (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    LayoutId TEXT NOT NULL,
    PhotoIndex INTEGER NOT NULL,
    X INTEGER NOT NULL,
    Y INTEGER NOT NULL,
    Width INTEGER NOT NULL,
    Height INTEGER NOT NULL,
    Rotation REAL DEFAULT 0,
    FOREIGN KEY (LayoutId) REFERENCES TemplateLayouts(Id) ON DELETE CASCADE,
    UNIQUE (LayoutId, PhotoIndex)
);

CREATE TABLE IF NOT EXISTS Templates (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT NOT NULL,
    CategoryId INTEGER NOT NULL,
    LayoutId TEXT NOT NULL,
    FolderPath TEXT NOT NULL UNIQUE,
    TemplatePath TEXT NOT NULL,
    PreviewPath TEXT NOT NULL,
    IsActive BOOLEAN NOT NULL DEFAULT 1,
    IsSeasonal BOOLEAN NOT NULL DEFAULT 0,
    Price DECIMAL(10,2) DEFAULT 0,
    SortOrder INTEGER NOT NULL DEFAULT 0,
    FileSize INTEGER DEFAULT 0,
    Description TEXT DEFAULT '',
    TemplateType INTEGER NOT NULL DEFAULT 0 CHECK (TemplateType IN (0, 1)),
    UploadedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UploadedBy TEXT,
    FOREIGN KEY (CategoryId) REFERENCES TemplateCategories(Id),
    FOREIGN KEY (LayoutId) REFERENCES TemplateLayouts(Id),
    FOREIGN KEY (UploadedBy) REFERENCES AdminUsers(UserId)
);

-- ============================================================================
-- TRANSACTIONS AND PRINTING
-- ============================================================================
CREATE TABLE IF NOT EXISTS Transactions (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    TransactionCode TEXT NOT NULL UNIQUE,
    ProductId INTEGER NOT NULL,
    TemplateId INTEGER,
    Quantity INTEGER NOT NULL DEFAULT 1,
    BasePrice DECIMAL(10,2) NOT NULL,
    TotalPrice DECIMAL(10,2) NOT NULL,
    PaymentMethod TEXT NOT NULL CHECK (PaymentMethod IN ('Cash', 'Credit', 'Free')),
    PaymentStatus TEXT NOT NULL DEFAULT 'Completed'
        CHECK (PaymentStatus IN ('Pending', 'Completed', 'Failed', 'Refunded')),
    CustomerEmail TEXT,
    SessionId TEXT,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    CompletedAt DATETIME,
    Notes TEXT,
    FOREIGN KEY (ProductId) REFERENCES Products(Id),
    FOREIGN KEY (TemplateId) REFERENCES Templates(Id)
);

CREATE TABLE IF NOT EXISTS PrintJobs (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    TransactionId INTEGER NOT NULL,
    Copies INTEGER NOT NULL DEFAULT 1,
    PrintStatus TEXT NOT NULL DEFAULT 'Pending'
        CHECK (PrintStatus IN ('Pending', 'Printing', 'Completed', 'Failed')),
    PrinterName TEXT,
    StartedAt DATETIME,
    CompletedAt DATETIME,
    FailureReason TEXT,
    PrintsUsed INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (TransactionId) REFERENCES Transactions(Id)
);

-- ============================================================================
-- SETTINGS AND BUSINESS INFO
-- ============================================================================
CREATE TABLE IF NOT EXISTS Settings (
    Id TEXT PRIMARY KEY,
    Category TEXT NOT NULL,
    Key TEXT NOT NULL,
    Value TEXT NOT NULL,
    DataType TEXT NOT NULL DEFAULT 'String',
    Description TEXT,
    IsUserEditable BOOLEAN NOT NULL DEFAULT 1,
    UpdatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UpdatedBy TEXT,
    UNIQUE (Category, Key),
    FOREIGN KEY (UpdatedBy) REFERENCES AdminUsers(UserId)
);

CREATE TABLE IF NOT EXISTS BusinessInfo (
    Id TEXT PRIMARY KEY,
    BusinessName TEXT NOT NULL,
    LogoPath TEXT,
    Address TEXT,
    ShowLogoOnPrints BOOLEAN NOT NULL DEFAULT 1,
    UpdatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UpdatedBy TEXT,
    FOREIGN KEY (UpdatedBy) REFERENCES AdminUsers(UserId)
);

-- ============================================================================
-- HARDWARE AND SUPPLIES
-- ============================================================================
CREATE TABLE IF NOT EXISTS HardwareStatus (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    ComponentName TEXT NOT NULL UNIQUE,
    Status TEXT NOT NULL CHECK (Status IN ('Online', 'Offline', 'Error', 'Maintenance')),
    LastCheckAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    ErrorCode TEXT,
    ErrorMessage TEXT,
    LastMaintenanceAt DATETIME
);

CREATE TABLE IF NOT EXISTS PrintSupplies (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    SupplyType TEXT NOT NULL CHECK (SupplyType IN ('Paper', 'Ink', 'Ribbon')),
    TotalCapacity INTEGER NOT NULL,
    CurrentCount INTEGER NOT NULL,
    LowThreshold INTEGER NOT NULL DEFAULT 100,
    CriticalThreshold INTEGER NOT NULL DEFAULT 50,
    InstalledAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    ReplacedAt DATETIME,
    Notes TEXT
);

CREATE TABLE IF NOT EXISTS SystemErrors (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    ErrorCode TEXT NOT NULL,
    ErrorMessage TEXT NOT NULL,
    Component TEXT NOT NULL,
    Severity TEXT NOT NULL CHECK (Severity IN ('Low', 'Medium', 'High', 'Critical')),
    IsResolved BOOLEAN NOT NULL DEFAULT 0,
    ResolvedAt DATETIME,
    ResolvedBy TEXT,
    FirstOccurrence DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    LastOccurrence DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    OccurrenceCount INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (ResolvedBy) REFERENCES AdminUsers(UserId)
);

-- ============================================================================
-- REPORTING
-- ============================================================================
CREATE TABLE IF NOT EXISTS DailySalesSummary (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Date TEXT NOT NULL UNIQUE,
    TotalRevenue DECIMAL(10,2) NOT NULL DEFAULT 0,
    TotalTransactions INTEGER NOT NULL DEFAULT 0,
    StripSales INTEGER NOT NULL DEFAULT 0,
    Photo4x6Sales INTEGER NOT NULL DEFAULT 0,
    SmartphonePrintSales INTEGER NOT NULL DEFAULT 0,
    CashPayments DECIMAL(10,2) NOT NULL DEFAULT 0,
    CreditPayments DECIMAL(10,2) NOT NULL DEFAULT 0,
    FreeTransactions INTEGER NOT NULL DEFAULT 0,
    PrintsUsed INTEGER NOT NULL DEFAULT 0,
    CreatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UpdatedAt DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_transactions_created ON Transactions(CreatedAt);
CREATE INDEX IF NOT EXISTS idx_templates_category ON Templates(CategoryId);
CREATE INDEX IF NOT EXISTS idx_print_jobs_transaction ON PrintJobs(TransactionId);

CREATE VIEW IF NOT EXISTS SalesOverview AS
SELECT
    DATE(t.CreatedAt) AS SaleDate,
    pc.Name AS ProductCategory,
    COUNT(*) AS TransactionCount,
    SUM(t.TotalPrice) AS Revenue,
    SUM(pj.Copies) AS TotalCopies,
    SUM(pj.PrintsUsed) AS PrintsUsed
FROM Transactions t
JOIN Products p ON t.ProductId = p.Id
JOIN ProductCategories pc ON p.CategoryId = pc.Id
LEFT JOIN PrintJobs pj ON t.Id = pj.TransactionId
WHERE t.PaymentStatus = 'Completed'
GROUP BY DATE(t.CreatedAt), pc.Name
ORDER BY SaleDate DESC, pc.Name;

CREATE VIEW IF NOT EXISTS PopularTemplates AS
SELECT
    t.Name AS TemplateName,
    tc.Name AS Category,
    COUNT(tr.Id) AS TimesUsed,
    SUM(tr.TotalPrice) AS Revenue,
    MAX(tr.CreatedAt) AS LastUsed
FROM Templates t
JOIN TemplateCategories tc ON t.CategoryId = tc.Id
LEFT JOIN Transactions tr ON t.Id = tr.TemplateId
WHERE t.IsActive = 1
GROUP BY t.Id, t.Name, tc.Name
ORDER BY TimesUsed DESC;
"""


async def apply_migration(db: "DbSessionPort") -> None:
    """Create the baseline tables and their reference rows."""
    await db.execute_script(SCHEMA)
    await seed.insert_reference_data(db)
